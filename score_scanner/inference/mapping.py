"""Model output index to MIDI pitch mapping."""

from dataclasses import dataclass

from ..core.constants import DEFAULT_MAX_PITCH, DEFAULT_MIN_PITCH, MIDI_MAX, MIDI_MIN
from ..core.errors import require


@dataclass(frozen=True)
class PitchMapping:
    """Linear index -> pitch mapping over a closed range.

    Index 0 is min_pitch, ascending one semitone per index; indices past
    the end of the range wrap around.
    """

    min_pitch: int = DEFAULT_MIN_PITCH
    max_pitch: int = DEFAULT_MAX_PITCH

    def __post_init__(self):
        require(
            MIDI_MIN <= self.min_pitch <= self.max_pitch <= MIDI_MAX,
            "pitch range must satisfy 0 <= min_pitch <= max_pitch <= 127",
            "min_pitch",
            (self.min_pitch, self.max_pitch),
        )

    @property
    def size(self) -> int:
        return self.max_pitch - self.min_pitch + 1

    def pitch_for_index(self, index: int) -> int:
        require(index >= 0, "output index must be non-negative", "index", index)
        return self.min_pitch + index % self.size
