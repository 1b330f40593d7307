"""Classification layer - Voice assignment.

Maps each raw detection to one of four fixed voices (SATB) and the MIDI
channel that carries it.
"""

from .voices import (
    classify,
    classify_all,
    voice_for_pitch,
    voice_for_staff_position,
    pitch_from_staff_position,
    voice_range,
    all_voices,
    channel_for_voice,
    voice_for_channel,
    notes_by_voice,
    dominant_voice,
)

__all__ = [
    "classify",
    "classify_all",
    "voice_for_pitch",
    "voice_for_staff_position",
    "pitch_from_staff_position",
    "voice_range",
    "all_voices",
    "channel_for_voice",
    "voice_for_channel",
    "notes_by_voice",
    "dominant_voice",
]
