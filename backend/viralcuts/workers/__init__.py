"""
Workers for ViralCuts.
"""
from viralcuts.workers.clip_pipeline import (
    ClipPipeline,
    ClipResult,
    FailedStep,
    PipelineResult,
    build_default_pipeline
)

__all__ = [
    "ClipPipeline",
    "ClipResult",
    "FailedStep",
    "PipelineResult",
    "build_default_pipeline"
]
