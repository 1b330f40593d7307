"""Pipeline configuration."""

import dataclasses
from dataclasses import dataclass, field

from ..core.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_DURATION_MS,
    DEFAULT_TEMPO,
)
from ..core.errors import require
from ..core.note import ms_to_beats
from ..inference.mapping import PitchMapping


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for a pipeline run.

    Attributes:
        confidence_threshold: Minimum confidence for patches and detections (default: 0.5)
        default_duration_ms: Note length given to every detection (default: 100)
        tempo: Sequence tempo in BPM (default: 120)
        batch_size: Tiles per inference call (default: 32)
        pitch_mapping: Model output index -> MIDI pitch (default: 36..96)
    """

    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    default_duration_ms: float = DEFAULT_DURATION_MS
    tempo: float = DEFAULT_TEMPO
    batch_size: int = DEFAULT_BATCH_SIZE
    pitch_mapping: PitchMapping = field(default_factory=PitchMapping)

    def __post_init__(self):
        require(
            0.0 <= self.confidence_threshold <= 1.0,
            "confidence_threshold must be in [0, 1]",
            "confidence_threshold",
            self.confidence_threshold,
        )
        require(
            self.default_duration_ms > 0,
            "default_duration_ms must be positive",
            "default_duration_ms",
            self.default_duration_ms,
        )
        require(self.tempo > 0, "tempo must be positive", "tempo", self.tempo)
        require(
            isinstance(self.batch_size, int) and self.batch_size > 0,
            "batch_size must be a positive integer",
            "batch_size",
            self.batch_size,
        )

    @property
    def default_duration_beats(self) -> float:
        """Default note duration converted to beats at the configured tempo."""
        return ms_to_beats(self.default_duration_ms, self.tempo)

    def with_overrides(self, **overrides) -> "PipelineConfig":
        """Return a copy with some fields replaced (validated again)."""
        return dataclasses.replace(self, **overrides)
