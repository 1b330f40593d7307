"""Image preprocessing - Cut a score image into fixed-size feature tiles.

Images are numpy arrays, either (H, W) grayscale or (H, W, C) with RGB
or RGBA channels, with 0-255 pixel values.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ..core.constants import DEFAULT_BATCH_SIZE, DEFAULT_PATCH_SIZE, DEFAULT_STRIDE
from ..core.errors import require

WHITE_THRESHOLD = 240
ROI_PADDING = 20


@dataclass
class ImagePatch:
    """A square tile cut from the source image."""

    data: np.ndarray  # (patch_size, patch_size) float32
    x: int  # Position in original image
    y: int
    confidence: float  # Likelihood the tile holds a note
    staff_position: Optional[int] = None


class PatchExtractor:
    """Sliding-window tile extraction for the inference model."""

    def __init__(
        self,
        patch_size: int = DEFAULT_PATCH_SIZE,
        stride: int = DEFAULT_STRIDE,
        grayscale: bool = True,
        normalize: bool = True,
    ):
        """
        Initialize PatchExtractor.

        Args:
            patch_size: Tile edge length in pixels
            stride: Step between tiles (patch_size / 2 gives 50% overlap)
            grayscale: Convert RGB(A) to luma; otherwise use the red channel
            normalize: Scale pixel values to 0-1
        """
        require(patch_size > 0, "patch_size must be positive", "patch_size", patch_size)
        require(stride > 0, "stride must be positive", "stride", stride)
        self.patch_size = patch_size
        self.stride = stride
        self.grayscale = grayscale
        self.normalize = normalize

    def to_grayscale(self, image: np.ndarray) -> np.ndarray:
        """Reduce an image to a single float32 channel."""
        image = np.asarray(image, dtype=np.float32)
        if image.ndim == 2:
            return image
        if not self.grayscale:
            return image[..., 0]
        r, g, b = image[..., 0], image[..., 1], image[..., 2]
        return 0.299 * r + 0.587 * g + 0.114 * b

    def extract(self, image: np.ndarray) -> List[ImagePatch]:
        """
        Extract overlapping tiles from an image.

        Args:
            image: (H, W) or (H, W, C) pixel array

        Returns:
            Tiles in row-major order (top to bottom, left to right)
        """
        gray = self.to_grayscale(image)
        if self.normalize:
            gray = gray / 255.0

        height, width = gray.shape
        size = self.patch_size
        patches = []
        for y in range(0, height - size + 1, self.stride):
            for x in range(0, width - size + 1, self.stride):
                tile = gray[y:y + size, x:x + size].astype(np.float32)
                patches.append(
                    ImagePatch(data=tile, x=x, y=y, confidence=self.patch_confidence(tile))
                )
        return patches

    @staticmethod
    def patch_confidence(tile: np.ndarray) -> float:
        """Higher pixel variance means more ink, so more likely a note."""
        return float(min(1.0, np.var(tile) * 2))

    @staticmethod
    def filter_patches(patches: List[ImagePatch], threshold: float) -> List[ImagePatch]:
        return [p for p in patches if p.confidence >= threshold]

    def auto_crop(
        self,
        image: np.ndarray,
        white_threshold: float = WHITE_THRESHOLD,
        padding: int = ROI_PADDING,
    ) -> np.ndarray:
        """
        Crop white margins around the notation.

        Args:
            image: Pixel array
            white_threshold: Mean channel value treated as background
            padding: Pixels kept around the detected content

        Returns:
            Cropped view of the image (the image itself if it is blank)
        """
        pixels = np.asarray(image, dtype=np.float32)
        brightness = pixels if pixels.ndim == 2 else pixels[..., :3].mean(axis=-1)
        rows, cols = np.nonzero(brightness < white_threshold)
        if rows.size == 0:
            return image

        height, width = brightness.shape
        top = max(0, int(rows.min()) - padding)
        bottom = min(height, int(rows.max()) + padding + 1)
        left = max(0, int(cols.min()) - padding)
        right = min(width, int(cols.max()) + padding + 1)
        return image[top:bottom, left:right]

    @staticmethod
    def adjust_brightness_contrast(
        image: np.ndarray, brightness: float = 1.0, contrast: float = 1.0
    ) -> np.ndarray:
        """Scale brightness, stretch contrast around mid-gray, keep alpha."""
        pixels = np.asarray(image, dtype=np.float32)
        adjusted = (pixels * brightness - 128.0) * contrast + 128.0
        adjusted = np.clip(adjusted, 0, 255)
        if pixels.ndim == 3 and pixels.shape[-1] == 4:
            adjusted[..., 3] = pixels[..., 3]
        return adjusted.astype(np.uint8)


def batch_patches(patches: List[ImagePatch], batch_size: int = DEFAULT_BATCH_SIZE) -> List[List[ImagePatch]]:
    """Split patches into consecutive groups of at most batch_size."""
    require(batch_size > 0, "batch_size must be positive", "batch_size", batch_size)
    return [patches[i:i + batch_size] for i in range(0, len(patches), batch_size)]


def stack_tiles(patches: List[ImagePatch]) -> np.ndarray:
    """Stack patch tiles into an (n, size, size) float32 array."""
    return np.stack([p.data for p in patches]).astype(np.float32)
