"""
PipelineStep — abstract base class for all pipeline steps.

Every step in the conversion pipeline inherits from this class.
The engine calls execute() and records timing, logging, and errors
automatically.  Steps only need to implement the business logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from docconvert.core.constants import StepStatus
from docconvert.pipeline.context import PipelineContext, StepResult

class PipelineStep(ABC):
    """
    Base class for every pipeline step.

    Subclasses MUST implement:
        - name (str)          — unique identifier, e.g. "fetch_remote"
        - description (str)   — human-readable label for logs
        - execute(ctx)        — the actual business logic

    Subclasses MAY implement:
        - rollback(ctx)       — cleanup on failure
    """

    name: str = "unnamed_step"
    description: str = "No description"

    @abstractmethod
    async def execute(self, ctx: PipelineContext) -> StepResult:
        """
        Run the step's logic.  Must return a StepResult.

        Read from and write to `ctx` to pass data between steps.
        Raise a PipelineError subclass on failure.
        """
        ...

    async def rollback(self, ctx: PipelineContext) -> None:
        """Optional cleanup when this step fails (e.g. delete partial files)."""
        pass

    # ─── Helpers available to all steps ────────────────

    def _success(
        self,
        started_at: datetime,
        metadata: dict[str, Any] | None = None,
    ) -> StepResult:
        """Build a successful StepResult with timing."""
        now = datetime.now(timezone.utc)
        duration_ms = int((now - started_at).total_seconds() * 1000)
        return StepResult(
            step_name=self.name,
            status=StepStatus.COMPLETED,
            started_at=started_at,
            completed_at=now,
            duration_ms=duration_ms,
            metadata=metadata or {},
        )

    def _now(self) -> datetime:
        """UTC-aware now."""
        return datetime.now(timezone.utc)
