"""Inference backend that wraps any tile classifier."""

from typing import Any, Callable, List, Optional, Union

import numpy as np

from ..input import ImagePatch, PatchExtractor
from .base import InferenceBackend

ModelLike = Union[Callable[[np.ndarray], Any], Any]


class PatchModelBackend(InferenceBackend):
    """Sliding-window preprocessing plus a pluggable model.

    ``model`` is either a callable taking an (n, size, size) array, or an
    object with a ``predict`` method (Keras style). A model given as None
    can be attached later with :meth:`load`.
    """

    def __init__(
        self,
        model: Optional[ModelLike] = None,
        extractor: Optional[PatchExtractor] = None,
        crop_margins: bool = False,
    ):
        self.model = model
        self.extractor = extractor or PatchExtractor()
        self.crop_margins = crop_margins

    def load(self, model: ModelLike) -> None:
        self.model = model

    def unload(self) -> None:
        self.model = None

    def is_ready(self) -> bool:
        return self.model is not None

    def extract_patches(self, image: Any) -> List[ImagePatch]:
        pixels = np.asarray(image)
        if self.crop_margins:
            pixels = self.extractor.auto_crop(pixels)
        return self.extractor.extract(pixels)

    def predict(self, tiles: np.ndarray) -> np.ndarray:
        if self.model is None:
            raise RuntimeError("Model not loaded. Call load() first.")

        # Models expect a trailing channel axis: (n, size, size, 1)
        batch = tiles[..., np.newaxis]
        if hasattr(self.model, "predict"):
            output = self.model.predict(batch)
        else:
            output = self.model(batch)
        return np.asarray(output, dtype=np.float32)
