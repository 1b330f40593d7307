import sys
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np
import pytest

# Ensure repository root is importable for `score_scanner` package resolution.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from score_scanner.core import RawDetection  # noqa: E402
from score_scanner.inference import InferenceBackend  # noqa: E402
from score_scanner.input import ImagePatch  # noqa: E402


class FakeBackend(InferenceBackend):
    """Backend returning canned patches and per-batch predictions.

    ``predictions`` is called with (batch_index, tiles) and returns the
    model output for that batch, or raises to simulate a failed call.
    """

    def __init__(
        self,
        patches: List[ImagePatch],
        predictions: Callable[[int, np.ndarray], np.ndarray],
        ready: bool = True,
    ):
        self.patches = patches
        self.predictions = predictions
        self.ready = ready
        self.calls = 0
        self.on_predict: Optional[Callable[[int], None]] = None

    def is_ready(self) -> bool:
        return self.ready

    def extract_patches(self, image):
        return list(self.patches)

    def predict(self, tiles):
        index = self.calls
        self.calls += 1
        if self.on_predict is not None:
            self.on_predict(index)
        return self.predictions(index, tiles)


def make_patches(count: int, confidence: float = 0.9, size: int = 24) -> List[ImagePatch]:
    return [
        ImagePatch(data=np.zeros((size, size), dtype=np.float32), x=i * 12, y=0, confidence=confidence)
        for i in range(count)
    ]


def one_hot(tiles: np.ndarray, index: int, outputs: int = 61, value: float = 0.9) -> np.ndarray:
    """One confident output per tile at the given index."""
    scores = np.zeros((len(tiles), outputs), dtype=np.float32)
    scores[:, index] = value
    return scores


@pytest.fixture
def detection() -> Callable[..., RawDetection]:
    """Factory for RawDetection with sensible defaults."""

    def _make(pitch: int = 60, **kwargs) -> RawDetection:
        kwargs.setdefault("confidence", 0.9)
        return RawDetection(pitch=pitch, **kwargs)

    return _make
