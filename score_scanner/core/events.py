"""Timed MIDI events and the immutable sequence that holds them."""

from dataclasses import dataclass, field
from types import MappingProxyType
from enum import Enum
from typing import Mapping, Optional, Tuple

from .constants import MAX_CHANNEL, MIDI_MAX, MIDI_MIN
from .errors import require
from .note import VOICE_CHANNELS, Voice, _is_finite, _is_int


class EventKind(str, Enum):
    NOTE_ON = "note_on"
    NOTE_OFF = "note_off"


@dataclass(frozen=True)
class Event:
    """A NOTE_ON or NOTE_OFF at a point in time.

    ``time`` is measured in beats from the start of the sequence at the
    sequence's current tempo. ``beat`` is the same point at the tempo the
    sequence was built with; tempo changes rescale from it so repeated
    changes never accumulate rounding error.
    """

    kind: EventKind
    pitch: int
    velocity: int
    time: float
    channel: int
    beat: Optional[float] = None

    def __post_init__(self):
        require(isinstance(self.kind, EventKind), "kind must be an EventKind", "kind", self.kind)
        require(
            _is_int(self.pitch) and MIDI_MIN <= self.pitch <= MIDI_MAX,
            "pitch must be an integer in 0-127",
            "pitch",
            self.pitch,
        )
        require(
            _is_int(self.velocity) and MIDI_MIN <= self.velocity <= MIDI_MAX,
            "velocity must be an integer in 0-127",
            "velocity",
            self.velocity,
        )
        require(
            _is_int(self.channel) and 0 <= self.channel <= MAX_CHANNEL,
            "channel must be an integer in 0-15",
            "channel",
            self.channel,
        )
        require(
            _is_finite(self.time) and self.time >= 0,
            "time must be a finite, non-negative number",
            "time",
            self.time,
        )
        if self.beat is None:
            object.__setattr__(self, "beat", float(self.time))
        else:
            require(_is_finite(self.beat) and self.beat >= 0, "beat must be non-negative", "beat", self.beat)

    @property
    def is_note_on(self) -> bool:
        return self.kind is EventKind.NOTE_ON


@dataclass(frozen=True)
class Sequence:
    """Time-ordered events plus per-voice views of them.

    Built once by the sequencing layer; transforms return new instances.
    """

    tempo_bpm: float
    events: Tuple[Event, ...] = ()
    reference_bpm: Optional[float] = None
    voices: Mapping[Voice, Tuple[Event, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        require(
            _is_finite(self.tempo_bpm) and self.tempo_bpm > 0,
            "tempo_bpm must be positive",
            "tempo_bpm",
            self.tempo_bpm,
        )
        object.__setattr__(self, "tempo_bpm", float(self.tempo_bpm))
        object.__setattr__(self, "events", tuple(self.events))
        if self.reference_bpm is None:
            object.__setattr__(self, "reference_bpm", self.tempo_bpm)
        require(self.reference_bpm > 0, "reference_bpm must be positive", "reference_bpm", self.reference_bpm)

        voices = {}
        for voice, channel in VOICE_CHANNELS.items():
            voices[voice] = tuple(e for e in self.events if e.channel == channel)
        object.__setattr__(self, "voices", MappingProxyType(voices))

    @property
    def total_duration(self) -> float:
        """Time of the last event in beats (0 for an empty sequence)."""
        if not self.events:
            return 0.0
        return max(e.time for e in self.events)

    @property
    def note_count(self) -> int:
        return sum(1 for e in self.events if e.is_note_on)

    def __len__(self) -> int:
        return len(self.events)
