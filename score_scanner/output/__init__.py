"""Output layer - Export to MIDI.

This layer serializes sequences to Standard MIDI File bytes and writes
or reloads them for inspection.
"""

from .midi import (
    MIDIExporter,
    MidiHeader,
    encode,
    encode_vlq,
    decode_vlq,
    read_header,
    tempo_to_microseconds,
)

__all__ = [
    "MIDIExporter",
    "MidiHeader",
    "encode",
    "encode_vlq",
    "decode_vlq",
    "read_header",
    "tempo_to_microseconds",
]
