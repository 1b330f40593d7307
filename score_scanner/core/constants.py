"""Global constants for Score Scanner."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127
MAX_CHANNEL = 15

# Musical defaults
DEFAULT_TEMPO = 120.0
TICKS_PER_BEAT = 480
DEFAULT_VELOCITY = 100
NOTE_OFF_VELOCITY = 0

# Shortest note the sequence builder will lay out (one tick)
MIN_DURATION_BEATS = 1.0 / TICKS_PER_BEAT

# Model output index -> pitch mapping (C2..C7)
DEFAULT_MIN_PITCH = 36
DEFAULT_MAX_PITCH = 96

# Image preprocessing defaults
DEFAULT_PATCH_SIZE = 24
DEFAULT_STRIDE = 12  # 50% overlap

# Pipeline defaults
DEFAULT_BATCH_SIZE = 32
DEFAULT_CONFIDENCE_THRESHOLD = 0.5
DEFAULT_DURATION_MS = 100.0
