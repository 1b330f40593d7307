"""Pipeline layer - Orchestrates inference, classification and sequencing.

Pipeline: Image -> Tiles -> [Model] -> Detections -> Voices -> Sequence
"""

from .config import PipelineConfig
from .orchestrator import (
    Pipeline,
    PipelineState,
    PipelineResult,
    PipelineStats,
    BatchResult,
    BatchFailure,
)

__all__ = [
    "PipelineConfig",
    "Pipeline",
    "PipelineState",
    "PipelineResult",
    "PipelineStats",
    "BatchResult",
    "BatchFailure",
]
