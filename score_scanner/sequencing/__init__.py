"""Sequencing layer - Classified notes to timed events.

Builds an immutable, time-ordered NOTE_ON/NOTE_OFF sequence with one
sub-stream per voice, plus pure tempo and mute transforms.
"""

from .builder import (
    build,
    build_with_timing,
    sort_events,
    with_tempo,
    with_voice_muted,
    events_for_voice,
    events_for_voices,
)

__all__ = [
    "build",
    "build_with_timing",
    "sort_events",
    "with_tempo",
    "with_voice_muted",
    "events_for_voice",
    "events_for_voices",
]
