"""Note types - detections before and after voice assignment."""

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Optional

from .constants import MIDI_MAX, MIDI_MIN, PITCH_NAMES
from .errors import require


class Voice(str, Enum):
    """One of the four fixed SATB parts."""

    SOPRANO = "soprano"
    ALTO = "alto"
    TENOR = "tenor"
    BASS = "bass"


# Closed pitch ranges, in evaluation order (first match wins)
VOICE_RANGES = {
    Voice.SOPRANO: (72, 96),  # C5 to C7
    Voice.ALTO: (60, 84),  # C4 to C6
    Voice.TENOR: (48, 72),  # C3 to C5
    Voice.BASS: (36, 60),  # C2 to C4
}

VOICE_CHANNELS = {
    Voice.SOPRANO: 0,
    Voice.ALTO: 1,
    Voice.TENOR: 2,
    Voice.BASS: 3,
}


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


@dataclass(frozen=True)
class RawDetection:
    """A candidate pitch observation from the inference collaborator.

    The pitch is not range-checked here: the classifier clamps it so a
    single bad detection never fails a run.
    """

    pitch: int  # MIDI pitch, nominally 0-127
    confidence: float  # 0.0 - 1.0
    duration: float = 1.0  # beats
    position_hint: Optional[int] = None  # staff position, 0 = top line
    timestamp: Optional[float] = None
    x: Optional[int] = None  # patch position in the source image
    y: Optional[int] = None

    def __post_init__(self):
        require(_is_int(self.pitch), "pitch must be an integer", "pitch", self.pitch)
        require(
            _is_finite(self.confidence) and 0.0 <= self.confidence <= 1.0,
            "confidence must be a real number in [0, 1]",
            "confidence",
            self.confidence,
        )
        require(_is_finite(self.duration), "duration must be a finite number", "duration", self.duration)
        require(
            self.position_hint is None or _is_int(self.position_hint),
            "position_hint must be an integer",
            "position_hint",
            self.position_hint,
        )
        require(
            self.timestamp is None or _is_finite(self.timestamp),
            "timestamp must be a finite number",
            "timestamp",
            self.timestamp,
        )
        # Normalize numpy scalars to plain Python values
        object.__setattr__(self, "pitch", int(self.pitch))
        object.__setattr__(self, "confidence", float(self.confidence))
        object.__setattr__(self, "duration", float(self.duration))
        if self.position_hint is not None:
            object.__setattr__(self, "position_hint", int(self.position_hint))
        if self.timestamp is not None:
            object.__setattr__(self, "timestamp", float(self.timestamp))

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        return pitch_name(self.pitch)


@dataclass(frozen=True)
class ClassifiedNote(RawDetection):
    """A detection assigned to a voice and its MIDI channel."""

    voice: Voice = Voice.BASS
    channel: int = VOICE_CHANNELS[Voice.BASS]

    def __post_init__(self):
        super().__post_init__()
        require(
            MIDI_MIN <= self.pitch <= MIDI_MAX,
            "classified pitch must be in 0-127",
            "pitch",
            self.pitch,
        )
        require(isinstance(self.voice, Voice), "voice must be a Voice", "voice", self.voice)
        require(
            self.channel == VOICE_CHANNELS[self.voice],
            "channel does not match voice",
            "channel",
            self.channel,
        )


def pitch_name(pitch: int) -> str:
    """Get note name for a MIDI pitch (60 -> 'C4')."""
    octave = (pitch // 12) - 1
    return f"{PITCH_NAMES[pitch % 12]}{octave}"


def ms_to_beats(ms: float, tempo: float) -> float:
    """Convert a duration in milliseconds to beats at the given tempo."""
    require(tempo > 0, "tempo must be positive", "tempo", tempo)
    return ms / 1000.0 * tempo / 60.0


def beats_to_ms(beats: float, tempo: float) -> float:
    """Convert a duration in beats to milliseconds at the given tempo."""
    require(tempo > 0, "tempo must be positive", "tempo", tempo)
    return beats * 60.0 / tempo * 1000.0
