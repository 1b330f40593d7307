"""Voice classification - Assign detections to SATB voices.

Primary assignment is by closed pitch range, evaluated soprano first so
the overlapping ranges resolve upward (72 is soprano, 60 is alto). A
staff position hint, when present, overrides the pitch result.
"""

from collections import Counter
from typing import Iterable, List, Tuple

from ..core import ClassifiedNote, RawDetection, Voice, VOICE_CHANNELS, VOICE_RANGES
from ..core.constants import MIDI_MAX, MIDI_MIN
from ..core.errors import require

# Staff position -> MIDI pitch, position 0 is the top line
TREBLE_NOTE_POSITIONS = {
    0: 83, 1: 81, 2: 79, 3: 77, 4: 75, 5: 73,
    6: 71, 7: 69, 8: 67, 9: 65, 10: 63,
}
BASS_NOTE_POSITIONS = {
    0: 71, 1: 69, 2: 67, 3: 65, 4: 63, 5: 61,
    6: 59, 7: 57, 8: 55, 9: 53, 10: 51,
}

_CHANNEL_VOICES = {channel: voice for voice, channel in VOICE_CHANNELS.items()}


def classify(detection: RawDetection) -> ClassifiedNote:
    """
    Assign a detection to a voice and MIDI channel.

    Args:
        detection: Raw detection from the inference stage

    Returns:
        ClassifiedNote with clamped pitch, voice and channel
    """
    pitch = min(MIDI_MAX, max(MIDI_MIN, detection.pitch))

    voice = voice_for_pitch(pitch)
    if detection.position_hint is not None:
        voice = voice_for_staff_position(detection.position_hint)

    return ClassifiedNote(
        pitch=pitch,
        confidence=detection.confidence,
        duration=detection.duration,
        position_hint=detection.position_hint,
        timestamp=detection.timestamp,
        x=detection.x,
        y=detection.y,
        voice=voice,
        channel=VOICE_CHANNELS[voice],
    )


def classify_all(detections: Iterable[RawDetection]) -> List[ClassifiedNote]:
    """Classify detections, preserving input order."""
    return [classify(d) for d in detections]


def voice_for_pitch(pitch: int) -> Voice:
    """First voice whose closed range contains pitch, else BASS."""
    for voice, (low, high) in VOICE_RANGES.items():
        if low <= pitch <= high:
            return voice
    return Voice.BASS


def voice_for_staff_position(position: int) -> Voice:
    """Voice for a staff position (treble clef assumed)."""
    if position <= 2:
        return Voice.SOPRANO
    elif position <= 4:
        return Voice.ALTO
    elif position <= 7:
        return Voice.TENOR
    return Voice.BASS


def pitch_from_staff_position(position: int, clef: str = "treble") -> int:
    """
    Look up the pitch written at a staff position.

    Args:
        position: Staff position (0 = top line, increases downward)
        clef: "treble" or "bass"

    Returns:
        MIDI pitch; 60 (treble) or 48 (bass) for unknown positions
    """
    if clef == "treble":
        return TREBLE_NOTE_POSITIONS.get(position, 60)
    elif clef == "bass":
        return BASS_NOTE_POSITIONS.get(position, 48)
    raise ValueError(f"Unknown clef: {clef}")


def voice_range(voice: Voice) -> Tuple[int, int]:
    return VOICE_RANGES[voice]


def all_voices() -> List[Voice]:
    return list(VOICE_RANGES)


def channel_for_voice(voice: Voice) -> int:
    return VOICE_CHANNELS[voice]


def voice_for_channel(channel: int) -> Voice:
    require(channel in _CHANNEL_VOICES, "no voice is routed to this channel", "channel", channel)
    return _CHANNEL_VOICES[channel]


def notes_by_voice(notes: Iterable[ClassifiedNote], voice: Voice) -> List[ClassifiedNote]:
    return [n for n in notes if n.voice == voice]


def dominant_voice(notes: Iterable[ClassifiedNote]) -> Voice:
    """Most frequent voice; ties go to the higher voice."""
    counts = Counter(n.voice for n in notes)
    # max() keeps the first maximum, and all_voices() is ordered high to low
    return max(all_voices(), key=lambda v: counts[v])
