"""Core types, constants and errors for Score Scanner."""

from .note import (
    RawDetection,
    ClassifiedNote,
    Voice,
    VOICE_RANGES,
    VOICE_CHANNELS,
    pitch_name,
    ms_to_beats,
    beats_to_ms,
)
from .events import Event, EventKind, Sequence
from .errors import (
    ScannerError,
    ContractViolation,
    EncodingError,
    CollaboratorFailure,
    NotReadyError,
    ErrorCategory,
)
from .constants import (
    PITCH_NAMES,
    DEFAULT_TEMPO,
    TICKS_PER_BEAT,
    DEFAULT_VELOCITY,
    NOTE_OFF_VELOCITY,
    MIN_DURATION_BEATS,
)

__all__ = [
    "RawDetection",
    "ClassifiedNote",
    "Voice",
    "VOICE_RANGES",
    "VOICE_CHANNELS",
    "pitch_name",
    "ms_to_beats",
    "beats_to_ms",
    "Event",
    "EventKind",
    "Sequence",
    "ScannerError",
    "ContractViolation",
    "EncodingError",
    "CollaboratorFailure",
    "NotReadyError",
    "ErrorCategory",
    "PITCH_NAMES",
    "DEFAULT_TEMPO",
    "TICKS_PER_BEAT",
    "DEFAULT_VELOCITY",
    "NOTE_OFF_VELOCITY",
    "MIN_DURATION_BEATS",
]
