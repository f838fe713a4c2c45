"""
PipelineEngine — runs a conversion flow's steps sequentially.

Responsibilities:
    - Execute each step with timing, logging, and error handling
    - Stop at the first failing step and run its rollback
    - Return a complete PipelineResult carrying the failure cause

No retries: every step either completes or the whole invocation fails.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog

from docconvert.core.constants import PipelineStatus, StepStatus
from docconvert.pipeline.context import PipelineContext, StepResult
from docconvert.pipeline.errors import PipelineError
from docconvert.pipeline.step import PipelineStep


@dataclass
class PipelineResult:
    """Final outcome of a pipeline execution."""

    execution_id: str
    status: str                     # PipelineStatus value
    total_duration_ms: int = 0
    step_results: list[dict[str, Any]] = field(default_factory=list)
    context_summary: dict[str, Any] = field(default_factory=dict)
    error: PipelineError | None = None
    failed_step: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == PipelineStatus.COMPLETED


class PipelineEngine:
    """
    Runs a sequence of PipelineStep objects against a PipelineContext.

    Usage::

        engine = PipelineEngine()
        result = await engine.run_steps(ctx, url_flow(store, converter))
        if not result.succeeded:
            raise result.error
    """

    def __init__(self) -> None:
        self.logger = structlog.get_logger("pipeline.engine")

    async def run_steps(
        self,
        ctx: PipelineContext,
        steps: list[PipelineStep],
    ) -> PipelineResult:
        """Execute an ordered list of steps against a context."""
        started_at = datetime.now(timezone.utc)
        ctx.total_steps = len(steps)

        log = self.logger.bind(
            execution_id=ctx.execution_id,
            source=ctx.request.source,
            total_steps=len(steps),
        )
        log.info("Pipeline started", source_ref=ctx.request.source_ref)

        pipeline_status = PipelineStatus.RUNNING
        steps_completed = 0
        failure: PipelineError | None = None
        failed_step: str | None = None

        for index, step in enumerate(steps):
            ctx.current_step_index = index
            step_number = index + 1

            step_log = log.bind(
                step_name=step.name,
                step_index=step_number,
                step_description=step.description,
            )

            # ── Execute step ──────────────────────────
            step_log.info(f"Step {step_number}/{len(steps)}: {step.description}")

            result, failure = await self._execute(step, ctx, step_log)
            ctx.step_results.append(result)

            if result.status == StepStatus.COMPLETED:
                steps_completed += 1
                step_log.info(
                    "Step completed",
                    duration_ms=result.duration_ms,
                    metadata=result.metadata,
                )
                continue

            step_log.error(
                "Step failed — pipeline stopping",
                error=result.error,
                error_type=type(failure).__name__,
            )
            ctx.add_error(f"Step '{step.name}' failed: {result.error}")
            pipeline_status = PipelineStatus.FAILED
            failed_step = step.name

            try:
                await step.rollback(ctx)
                step_log.info("Rollback completed")
            except Exception as rollback_exc:
                step_log.warning("Rollback failed", error=str(rollback_exc))

            break

        # ── Finalise ──────────────────────────────────
        completed_at = datetime.now(timezone.utc)
        total_duration_ms = int((completed_at - started_at).total_seconds() * 1000)

        if pipeline_status != PipelineStatus.FAILED:
            pipeline_status = PipelineStatus.COMPLETED

        log.info(
            "Pipeline finished",
            status=pipeline_status,
            duration_ms=total_duration_ms,
        )

        return PipelineResult(
            execution_id=ctx.execution_id,
            status=pipeline_status,
            total_duration_ms=total_duration_ms,
            step_results=[sr.to_dict() for sr in ctx.step_results],
            context_summary=ctx.to_summary_dict(),
            error=failure,
            failed_step=failed_step,
        )

    async def _execute(
        self,
        step: PipelineStep,
        ctx: PipelineContext,
        log: structlog.BoundLogger,
    ) -> tuple[StepResult, PipelineError | None]:
        """Run one step, turning a raised error into a failed StepResult."""
        started_at = datetime.now(timezone.utc)

        try:
            return await step.execute(ctx), None

        except PipelineError as exc:
            exc.execution_id = exc.execution_id or ctx.execution_id
            exc.step_name = exc.step_name or step.name
            return self._failed(step, started_at, str(exc)), exc

        except Exception as exc:
            # Unexpected error: keep the traceback
            log.exception("Unexpected error in step", error=str(exc))
            wrapped = PipelineError(
                f"Unexpected: {exc}",
                execution_id=ctx.execution_id,
                step_name=step.name,
                details={"traceback": traceback.format_exc()},
            )
            wrapped.__cause__ = exc
            return self._failed(step, started_at, str(wrapped)), wrapped

    @staticmethod
    def _failed(step: PipelineStep, started_at: datetime, error: str) -> StepResult:
        completed_at = datetime.now(timezone.utc)
        return StepResult(
            step_name=step.name,
            status=StepStatus.FAILED,
            duration_ms=int((completed_at - started_at).total_seconds() * 1000),
            error=error,
        )
