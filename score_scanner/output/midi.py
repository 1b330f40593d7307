"""MIDI export functionality.

Writes a Sequence as a Standard MIDI File, format 0, one track:

    "MThd" 00000006 0000 0001 <ticks per beat>
    "MTrk" <track length> FF 51 03 <tempo> (<delta> <status> <pitch> <velocity>)* 00 FF 2F 00

The encoder is byte-exact and deterministic. It never clamps: an event
that cannot be represented means an upstream invariant was broken, and
raises EncodingError.
"""

import io
import math
import struct
from pathlib import Path
from typing import NamedTuple, Tuple

import pretty_midi

from ..core import EncodingError, Event, EventKind, Sequence
from ..core.constants import MAX_CHANNEL, MIDI_MAX, MIDI_MIN, TICKS_PER_BEAT

HEADER_CHUNK = b"MThd"
TRACK_CHUNK = b"MTrk"
HEADER_LENGTH = 6

NOTE_ON_STATUS = 0x90
NOTE_OFF_STATUS = 0x80
META_EVENT = 0xFF
META_TEMPO = 0x51
META_END_OF_TRACK = 0x2F

MAX_TEMPO_MICROSECONDS = 0xFFFFFF
MAX_VLQ = 0x0FFFFFFF  # four VLQ bytes


class MidiHeader(NamedTuple):
    """Parsed header chunk plus the track chunk prefix."""

    chunk_type: bytes
    length: int
    format: int
    num_tracks: int
    ticks_per_beat: int
    track_chunk_type: bytes
    track_length: int


def encode_vlq(value: int) -> bytes:
    """
    Encode a variable-length quantity.

    Seven data bits per byte, most significant group first, with the
    continuation bit (0x80) set on every byte except the last.

    Args:
        value: Non-negative integer up to 0x0FFFFFFF

    Returns:
        Encoded bytes (1-4 bytes)
    """
    if value < 0 or value > MAX_VLQ:
        raise EncodingError(
            message="variable-length quantity out of range",
            field_name="delta",
            value=value,
        )

    groups = [value & 0x7F]
    value >>= 7
    while value > 0:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def decode_vlq(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode a variable-length quantity, returning (value, next_offset)."""
    value = 0
    while True:
        byte = data[offset]
        offset += 1
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, offset


def _round_half_up(value: float) -> int:
    # halves go up, not to the nearest even integer
    return math.floor(value + 0.5)


def tempo_to_microseconds(tempo_bpm: float) -> int:
    """Microseconds per beat, as stored in the tempo meta-event."""
    return _round_half_up(60_000_000 / tempo_bpm)


def encode(sequence: Sequence, ticks_per_beat: int = TICKS_PER_BEAT) -> bytes:
    """
    Encode a sequence as Standard MIDI File bytes.

    Args:
        sequence: Sequence to encode
        ticks_per_beat: Header time division

    Returns:
        Complete MIDI file contents

    Raises:
        EncodingError: On out-of-range data bytes, channels or tempo, or
            events that are not in time order
    """
    track = _encode_track(sequence, ticks_per_beat)

    header = HEADER_CHUNK + struct.pack(">IHHH", HEADER_LENGTH, 0, 1, ticks_per_beat)
    return header + TRACK_CHUNK + struct.pack(">I", len(track)) + track


def _encode_track(sequence: Sequence, ticks_per_beat: int) -> bytes:
    microseconds = tempo_to_microseconds(sequence.tempo_bpm)
    if not 0 < microseconds <= MAX_TEMPO_MICROSECONDS:
        raise EncodingError(
            message="tempo does not fit a 3-byte tempo meta-event",
            field_name="tempo_bpm",
            value=sequence.tempo_bpm,
        )

    track = bytearray()
    track += encode_vlq(0)
    track += bytes([META_EVENT, META_TEMPO, 0x03]) + microseconds.to_bytes(3, "big")

    last_tick = 0
    for index, event in enumerate(sequence.events):
        tick = _round_half_up(event.time * ticks_per_beat)
        delta = tick - last_tick
        if delta < 0:
            raise EncodingError(
                message="events are not in time order",
                field_name="time",
                value=event.time,
                event_index=index,
            )
        track += encode_vlq(delta)
        track += _encode_event(event, index)
        last_tick = tick

    track += encode_vlq(0)
    track += bytes([META_EVENT, META_END_OF_TRACK, 0x00])
    return bytes(track)


def _encode_event(event: Event, index: int) -> bytes:
    status = NOTE_ON_STATUS if event.kind is EventKind.NOTE_ON else NOTE_OFF_STATUS
    if not 0 <= event.channel <= MAX_CHANNEL:
        raise EncodingError(message="channel out of range", field_name="channel", value=event.channel, event_index=index)
    for name in ("pitch", "velocity"):
        value = getattr(event, name)
        if not MIDI_MIN <= value <= MIDI_MAX:
            raise EncodingError(message=f"{name} out of range", field_name=name, value=value, event_index=index)
    return bytes([status | event.channel, event.pitch, event.velocity])


def read_header(data: bytes) -> MidiHeader:
    """Parse the header chunk and the first track chunk prefix."""
    if len(data) < 22:
        raise EncodingError(message="data too short for a MIDI header", field_name="data", value=len(data))
    chunk_type = data[0:4]
    length, fmt, num_tracks, ticks = struct.unpack(">IHHH", data[4:14])
    track_type = data[14:18]
    (track_length,) = struct.unpack(">I", data[18:22])
    return MidiHeader(chunk_type, length, fmt, num_tracks, ticks, track_type, track_length)


class MIDIExporter:
    """Export sequences to MIDI files."""

    def __init__(self, ticks_per_beat: int = TICKS_PER_BEAT):
        """
        Initialize MIDIExporter.

        Args:
            ticks_per_beat: Time division written to the header
        """
        self.ticks_per_beat = ticks_per_beat

    def encode(self, sequence: Sequence) -> bytes:
        return encode(sequence, self.ticks_per_beat)

    def export(self, sequence: Sequence, output_path: str) -> Path:
        """
        Export a sequence to a MIDI file.

        Args:
            sequence: Sequence to write
            output_path: Path to output MIDI file

        Returns:
            Path written
        """
        data = self.encode(sequence)

        # Ensure output directory exists
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        path.write_bytes(data)
        return path

    def to_pretty_midi(self, sequence: Sequence) -> pretty_midi.PrettyMIDI:
        """Load the encoded sequence into a PrettyMIDI object without saving."""
        return pretty_midi.PrettyMIDI(io.BytesIO(self.encode(sequence)))
