"""Score Scanner - Sheet music image to voice-separated MIDI.

Architecture Layers:
    1. core/            - Types, constants and errors
    2. input/           - Image preprocessing into model tiles
    3. inference/       - Interface to the external pitch-detection model
    4. classification/  - SATB voice assignment
    5. sequencing/      - Timed event sequences and transforms
    6. output/          - MIDI encoding and export
    7. pipeline/        - Run orchestration (batching, stats, cancellation)
"""

__version__ = "0.1.0"

# Core types
from .core import (
    RawDetection,
    ClassifiedNote,
    Voice,
    Event,
    EventKind,
    Sequence,
    ScannerError,
    ContractViolation,
    EncodingError,
    CollaboratorFailure,
    NotReadyError,
)

# Input layer
from .input import PatchExtractor, ImagePatch

# Inference layer
from .inference import InferenceBackend, PatchModelBackend, PitchMapping

# Classification layer
from .classification import classify, classify_all

# Sequencing layer
from .sequencing import (
    build,
    with_tempo,
    with_voice_muted,
    events_for_voice,
    events_for_voices,
)

# Output layer
from .output import MIDIExporter, encode

# Pipeline layer
from .pipeline import Pipeline, PipelineConfig, PipelineResult, PipelineState

__all__ = [
    # Core
    "RawDetection",
    "ClassifiedNote",
    "Voice",
    "Event",
    "EventKind",
    "Sequence",
    "ScannerError",
    "ContractViolation",
    "EncodingError",
    "CollaboratorFailure",
    "NotReadyError",
    # Input
    "PatchExtractor",
    "ImagePatch",
    # Inference
    "InferenceBackend",
    "PatchModelBackend",
    "PitchMapping",
    # Classification
    "classify",
    "classify_all",
    # Sequencing
    "build",
    "with_tempo",
    "with_voice_muted",
    "events_for_voice",
    "events_for_voices",
    # Output
    "MIDIExporter",
    "encode",
    # Pipeline
    "Pipeline",
    "PipelineConfig",
    "PipelineResult",
    "PipelineState",
]
