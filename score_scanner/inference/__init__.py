"""Inference layer - Interface to the external pitch-detection model.

The model itself lives outside this package; this layer defines the
contract the pipeline calls and a generic adaptor for tile classifiers.
"""

from .base import InferenceBackend
from .backend import PatchModelBackend
from .mapping import PitchMapping

__all__ = [
    "InferenceBackend",
    "PatchModelBackend",
    "PitchMapping",
]
