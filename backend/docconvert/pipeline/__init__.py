"""
Conversion pipeline — step engine plus the two entry flows.

The orchestrator (docconvert.pipeline.orchestrator) turns one
ConversionRequest into exactly one ConversionOutcome by running
fetch/download → convert → upload steps through the PipelineEngine,
then notifying an optional callback.
"""

from docconvert.pipeline.context import (
    ConversionOutcome,
    ConversionRequest,
    PipelineContext,
    StepResult,
)
from docconvert.pipeline.engine import PipelineEngine, PipelineResult
from docconvert.pipeline.step import PipelineStep

__all__ = [
    "ConversionOutcome",
    "ConversionRequest",
    "PipelineContext",
    "PipelineEngine",
    "PipelineResult",
    "PipelineStep",
    "StepResult",
]
