"""Base classes for the inference collaborator."""

from abc import ABC, abstractmethod
from typing import Any, List

import numpy as np

from ..input import ImagePatch


class InferenceBackend(ABC):
    """Abstract interface to the image model that detects pitches.

    The pipeline owns batching, thresholding and pitch mapping; a backend
    only turns an image into tiles and tiles into confidence vectors.
    """

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether the model is loaded and predict() may be called."""

    @abstractmethod
    def extract_patches(self, image: Any) -> List[ImagePatch]:
        """
        Preprocess an image into candidate tiles.

        Args:
            image: Image handle understood by the backend

        Returns:
            Candidate tiles with their positions and patch confidence
        """

    @abstractmethod
    def predict(self, tiles: np.ndarray) -> np.ndarray:
        """
        Run the model on a batch of tiles.

        Args:
            tiles: (n, size, size) float32 array

        Returns:
            (n, k) confidence vectors, one row per tile. A flat array
            is accepted and split evenly across the tiles.
        """
