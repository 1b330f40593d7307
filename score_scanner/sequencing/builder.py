"""Sequence building - Lay classified notes out as timed MIDI events.

Notes are placed one after another on a single time cursor, so the
output is monophonic by construction: each note starts where the
previous one ended.
"""

import dataclasses
from typing import Iterable, List, Sequence as SequenceType

from ..core import ClassifiedNote, Event, EventKind, Sequence, Voice, VOICE_CHANNELS
from ..core.constants import (
    DEFAULT_TEMPO,
    DEFAULT_VELOCITY,
    MIN_DURATION_BEATS,
    NOTE_OFF_VELOCITY,
)
from ..core.errors import require

# NOTE_OFF sorts before NOTE_ON at the same time
_KIND_RANK = {EventKind.NOTE_OFF: 0, EventKind.NOTE_ON: 1}


def build(notes: SequenceType[ClassifiedNote], tempo_bpm: float = DEFAULT_TEMPO) -> Sequence:
    """
    Build a time-ordered event sequence from classified notes.

    Args:
        notes: Classified notes; may be empty
        tempo_bpm: Tempo in BPM (must be positive)

    Returns:
        Sequence whose events hold one NOTE_ON/NOTE_OFF pair per note
    """
    require(tempo_bpm > 0, "tempo_bpm must be positive", "tempo_bpm", tempo_bpm)

    ordered = sorted(notes, key=lambda n: n.timestamp or 0.0)

    events: List[Event] = []
    current_time = 0.0
    for note in ordered:
        duration = max(note.duration, MIN_DURATION_BEATS)
        note_on_time = current_time
        note_off_time = current_time + duration

        events.append(
            Event(
                kind=EventKind.NOTE_ON,
                pitch=note.pitch,
                velocity=DEFAULT_VELOCITY,
                time=note_on_time,
                channel=note.channel,
            )
        )
        events.append(
            Event(
                kind=EventKind.NOTE_OFF,
                pitch=note.pitch,
                velocity=NOTE_OFF_VELOCITY,
                time=note_off_time,
                channel=note.channel,
            )
        )
        current_time = note_off_time

    return Sequence(tempo_bpm=tempo_bpm, events=sort_events(events))


def build_with_timing(
    notes: SequenceType[ClassifiedNote],
    start_time: float = 0.0,
    tempo_bpm: float = DEFAULT_TEMPO,
) -> Sequence:
    """Stamp notes with consecutive timestamps from start_time, then build."""
    timed = [
        dataclasses.replace(note, timestamp=start_time + i * (note.duration or 1.0))
        for i, note in enumerate(notes)
    ]
    return build(timed, tempo_bpm)


def sort_events(events: Iterable[Event]) -> List[Event]:
    """Sort by time, NOTE_OFF before NOTE_ON on ties, then emission order."""
    indexed = list(enumerate(events))
    indexed.sort(key=lambda item: (item[1].time, _KIND_RANK[item[1].kind], item[0]))
    return [event for _, event in indexed]


def with_tempo(sequence: Sequence, new_bpm: float) -> Sequence:
    """
    Rescale event times for a new tempo.

    Times are recomputed from each event's build-time position, so
    ``with_tempo(with_tempo(s, a), b)`` equals ``with_tempo(s, b)``.

    Args:
        sequence: Source sequence (unchanged)
        new_bpm: New tempo in BPM (must be positive)

    Returns:
        New Sequence at the new tempo
    """
    require(new_bpm > 0, "new_bpm must be positive", "new_bpm", new_bpm)

    ratio = sequence.reference_bpm / new_bpm
    events = [dataclasses.replace(e, time=e.beat * ratio) for e in sequence.events]
    return Sequence(
        tempo_bpm=new_bpm,
        events=events,
        reference_bpm=sequence.reference_bpm,
    )


def with_voice_muted(sequence: Sequence, voice: Voice) -> Sequence:
    """Zero the velocity of every event on the voice's channel."""
    channel = VOICE_CHANNELS[voice]
    events = [
        dataclasses.replace(e, velocity=0) if e.channel == channel else e
        for e in sequence.events
    ]
    return Sequence(
        tempo_bpm=sequence.tempo_bpm,
        events=events,
        reference_bpm=sequence.reference_bpm,
    )


def events_for_voice(sequence: Sequence, voice: Voice) -> List[Event]:
    return list(sequence.voices[voice])


def events_for_voices(sequence: Sequence, voices: Iterable[Voice]) -> List[Event]:
    """Events of several voices merged in global time order."""
    channels = {VOICE_CHANNELS[v] for v in voices}
    # voice streams are filtered views of the sorted stream
    return [e for e in sequence.events if e.channel in channels]
