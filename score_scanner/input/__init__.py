"""Input layer - Image preprocessing into model-sized tiles."""

from .patches import ImagePatch, PatchExtractor, batch_patches, stack_tiles

__all__ = [
    "ImagePatch",
    "PatchExtractor",
    "batch_patches",
    "stack_tiles",
]
