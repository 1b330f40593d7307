"""Pipeline orchestrator - image -> detections -> voices -> MIDI sequence.

A run moves through

    idle -> preprocessing -> inferring -> classifying -> sequencing -> done

and ends in ``error`` if any stage raises. ``cancel()`` is cooperative:
the flag is checked when preprocessing finishes and before every
inference batch, so a batch already handed to the model runs to
completion. Classification and sequencing are never interrupted.

Per-batch inference failures do not abort the run. They are logged,
recorded in the run statistics, and the remaining batches continue.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..classification import classify_all
from ..core import ClassifiedNote, CollaboratorFailure, NotReadyError, RawDetection, ScannerError, Sequence
from ..inference import InferenceBackend
from ..input import ImagePatch, PatchExtractor, batch_patches, stack_tiles
from ..output import encode
from ..sequencing import build
from .config import PipelineConfig

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    PREPROCESSING = "preprocessing"
    INFERRING = "inferring"
    CLASSIFYING = "classifying"
    SEQUENCING = "sequencing"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class BatchFailure:
    """A batch whose inference call failed."""

    index: int
    error: str


@dataclass
class BatchResult:
    """Outcome of one inference batch: detections or a recorded failure."""

    index: int
    detections: List[RawDetection] = field(default_factory=list)
    failure: Optional[CollaboratorFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass
class PipelineStats:
    """Statistics gathered during a run."""

    total_patches: int = 0
    patches_above_threshold: int = 0
    notes_detected: int = 0
    mean_confidence: float = 0.0
    batches_total: int = 0
    failures: List[BatchFailure] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def batches_failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "total_patches": self.total_patches,
            "patches_above_threshold": self.patches_above_threshold,
            "notes_detected": self.notes_detected,
            "mean_confidence": self.mean_confidence,
            "batches_total": self.batches_total,
            "batches_failed": self.batches_failed,
            "failures": [{"index": f.index, "error": f.error} for f in self.failures],
            "processing_time": self.processing_time,
        }


@dataclass
class PipelineResult:
    """Result of a completed or cancelled run."""

    state: PipelineState
    detections: List[RawDetection]
    classified_notes: List[ClassifiedNote]
    sequence: Sequence
    stats: PipelineStats
    image_shape: Optional[Tuple[int, int]] = None

    @property
    def cancelled(self) -> bool:
        return self.state is PipelineState.CANCELLED

    def to_midi(self) -> bytes:
        """Encode the sequence as MIDI file bytes."""
        return encode(self.sequence)


class Pipeline:
    """Runs the inference backend and turns its output into a sequence.

    One instance carries the state of one run at a time. Starting a
    second run before the first finishes is the caller's responsibility.
    """

    def __init__(self, backend: Optional[InferenceBackend], config: Optional[PipelineConfig] = None):
        """
        Initialize Pipeline.

        Args:
            backend: Inference collaborator; None means not available yet
            config: Pipeline configuration (defaults if None)
        """
        self.backend = backend
        self.config = config or PipelineConfig()
        self._state = PipelineState.IDLE
        self._cancelled = False

    @property
    def state(self) -> PipelineState:
        return self._state

    def is_ready(self) -> bool:
        return self.backend is not None and self.backend.is_ready()

    def update_config(self, **overrides) -> None:
        self.config = self.config.with_overrides(**overrides)

    def cancel(self) -> None:
        """Request cancellation at the next stage boundary.

        Only affects a run that has already started: ``run()`` clears the
        flag on entry, so a cancel issued before a scheduled run task first
        executes is discarded.
        """
        self._cancelled = True
        logger.info("Processing cancellation requested")

    async def run(self, image: Any) -> PipelineResult:
        """
        Process an image end to end.

        Args:
            image: Image handle passed through to the backend

        Returns:
            PipelineResult in state DONE or CANCELLED

        Raises:
            NotReadyError: If the backend is missing or not loaded
            CollaboratorFailure: If preprocessing fails
        """
        start_time = time.time()
        self._cancelled = False
        self._state = PipelineState.IDLE

        if not self.is_ready():
            self._state = PipelineState.ERROR
            raise NotReadyError(message="Pipeline not initialized: inference backend unavailable")

        stats = PipelineStats()
        detections: List[RawDetection] = []

        try:
            self._enter(PipelineState.PREPROCESSING)
            patches = await self._preprocess(image)
            candidates = PatchExtractor.filter_patches(patches, self.config.confidence_threshold)
            stats.total_patches = len(patches)
            stats.patches_above_threshold = len(candidates)
            image_shape = _image_shape(image)

            if not self._cancelled:
                self._enter(PipelineState.INFERRING)
                batches = batch_patches(candidates, self.config.batch_size)
                stats.batches_total = len(batches)
                for index, batch in enumerate(batches):
                    if self._cancelled:
                        break
                    result = await self._infer_batch(index, batch)
                    if result.ok:
                        detections.extend(result.detections)
                    else:
                        stats.failures.append(BatchFailure(index=index, error=result.failure.message))

            stats.notes_detected = len(detections)
            if detections:
                stats.mean_confidence = float(np.mean([d.confidence for d in detections]))

            if self._cancelled:
                # Partial detections are still classified, without entering those stages
                classified = classify_all(detections)
                sequence = build(classified, self.config.tempo)
                self._state = PipelineState.CANCELLED
                logger.info(f"Run cancelled after {stats.notes_detected} detections")
            else:
                self._enter(PipelineState.CLASSIFYING)
                classified = classify_all(detections)

                self._enter(PipelineState.SEQUENCING)
                sequence = build(classified, self.config.tempo)
                self._state = PipelineState.DONE
        except Exception:
            self._state = PipelineState.ERROR
            logger.exception("Pipeline run failed")
            raise

        stats.processing_time = time.time() - start_time
        logger.info(
            f"Pipeline {self._state.value} in {stats.processing_time:.2f}s: "
            f"{stats.total_patches} patches, {stats.patches_above_threshold} above threshold, "
            f"{stats.notes_detected} notes, {stats.batches_failed}/{stats.batches_total} batches failed"
        )

        return PipelineResult(
            state=self._state,
            detections=detections,
            classified_notes=classified,
            sequence=sequence,
            stats=stats,
            image_shape=image_shape,
        )

    async def run_many(self, images: Iterable[Any]) -> List[PipelineResult]:
        """Process images one after another, skipping those that fail."""
        results = []
        for i, image in enumerate(images):
            try:
                results.append(await self.run(image))
            except ScannerError as e:
                logger.error(f"Error processing image {i}: {e}")
                continue
        return results

    def _enter(self, state: PipelineState) -> None:
        logger.info(f"Stage: {state.value}")
        self._state = state

    async def _preprocess(self, image: Any) -> List[ImagePatch]:
        try:
            return await asyncio.to_thread(self.backend.extract_patches, image)
        except Exception as e:
            raise CollaboratorFailure(message=f"Preprocessing failed: {e}") from e

    async def _infer_batch(self, index: int, batch: List[ImagePatch]) -> BatchResult:
        try:
            tiles = stack_tiles(batch)
            output = await asyncio.to_thread(self.backend.predict, tiles)
            detections = self._parse_predictions(output, batch)
        except Exception as e:
            logger.warning(f"Inference failed for batch {index}: {e}", exc_info=True)
            return BatchResult(
                index=index,
                failure=CollaboratorFailure(message=str(e) or type(e).__name__, batch_index=index),
            )
        return BatchResult(index=index, detections=detections)

    def _parse_predictions(self, output: Any, batch: List[ImagePatch]) -> List[RawDetection]:
        """Turn per-tile confidence vectors into detections above threshold."""
        flat = np.asarray(output, dtype=np.float32).reshape(-1)
        outputs_per_patch = flat.size // len(batch)
        if outputs_per_patch == 0:
            return []

        scores = flat[: outputs_per_patch * len(batch)].reshape(len(batch), outputs_per_patch)
        duration = self.config.default_duration_beats
        mapping = self.config.pitch_mapping

        detections = []
        rows, cols = np.nonzero(scores >= self.config.confidence_threshold)
        for row, col in zip(rows, cols):
            patch = batch[row]
            detections.append(
                RawDetection(
                    pitch=mapping.pitch_for_index(int(col)),
                    confidence=float(np.clip(scores[row, col], 0.0, 1.0)),
                    duration=duration,
                    position_hint=patch.staff_position,
                    x=patch.x,
                    y=patch.y,
                )
            )
        return detections


def _image_shape(image: Any) -> Optional[Tuple[int, int]]:
    shape = np.shape(image)
    if len(shape) < 2:
        return None
    return int(shape[0]), int(shape[1])
