"""
ConversionOrchestrator — the two entry flows around the step engine.

    convert_from_url(request)      → ConversionOutcome
        fetch → convert → upload, output key conversions/{ms}/{name}.pdf

    convert_from_storage(request)  → ConversionOutcome
        download → convert → upload (same bucket, key with .pdf),
        then a best-effort callback when request.callback_url is set

Exactly one outcome is produced per request and at most one callback
is sent.  The orchestrator never raises for pipeline failures; the
trigger adapters (FastAPI route, Celery task) decide what a failed
outcome means for their caller.
"""

from __future__ import annotations

import shutil
import time
import uuid
from typing import Callable

from docconvert.core.config import Settings, settings
from docconvert.core.logging import get_logger
from docconvert.ingestion.remote_fetcher import RemoteFetcher
from docconvert.notification.notifier import Notifier
from docconvert.pipeline.context import ConversionOutcome, ConversionRequest, PipelineContext
from docconvert.pipeline.engine import PipelineEngine
from docconvert.pipeline.errors import NotifyError, PipelineError
from docconvert.pipeline.flow_resolver import FlowResolver
from docconvert.pipeline.paths import WorkingPaths, storage_output_key, url_output_key
from docconvert.processing.converter import LibreOfficeConverter
from docconvert.storage.blob_store import BlobStore

logger = get_logger(__name__)


class ConversionOrchestrator:
    """Sequences fetch/download, conversion, upload and notification."""

    def __init__(
        self,
        resolver: FlowResolver,
        notifier: Notifier,
        *,
        engine: PipelineEngine | None = None,
        scratch_root: str = settings.SCRATCH_DIR,
        keep_scratch: bool = settings.KEEP_SCRATCH,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.resolver = resolver
        self.notifier = notifier
        self.engine = engine or PipelineEngine()
        self.scratch_root = scratch_root
        self.keep_scratch = keep_scratch
        self.clock = clock

    @classmethod
    def from_settings(cls, config: Settings = settings) -> ConversionOrchestrator:
        """Wire the production collaborators from application settings."""
        resolver = FlowResolver(
            store=BlobStore(
                region=config.AWS_REGION,
                endpoint=config.STORAGE_ENDPOINT,
                public_base_url=config.STORAGE_PUBLIC_BASE_URL,
            ),
            fetcher=RemoteFetcher(timeout=config.FETCH_TIMEOUT_SECONDS),
            converter=LibreOfficeConverter(
                binary=config.SOFFICE_BINARY,
                timeout=config.CONVERSION_TIMEOUT_SECONDS,
            ),
        )
        return cls(
            resolver,
            Notifier(timeout=config.NOTIFY_TIMEOUT_SECONDS),
            scratch_root=config.SCRATCH_DIR,
            keep_scratch=config.KEEP_SCRATCH,
        )

    # ─── Entry flows ───────────────────────────────────

    async def convert_from_url(self, request: ConversionRequest) -> ConversionOutcome:
        """Run the URL-triggered flow.  The result is always public-read."""
        epoch_millis = int(round(self.clock() * 1000))
        output_key = url_output_key(request.file_name, epoch_millis)
        return await self._run(request, output_key)

    async def convert_from_storage(self, request: ConversionRequest) -> ConversionOutcome:
        """Run the storage-triggered flow, then report to the callback if any."""
        outcome = await self._run(request, storage_output_key(request.key))
        if request.callback_url:
            await self._notify(request.callback_url, outcome)
        return outcome

    # ─── Internals ─────────────────────────────────────

    async def _run(self, request: ConversionRequest, output_key: str) -> ConversionOutcome:
        execution_id = str(uuid.uuid4())
        paths = WorkingPaths.build(self.scratch_root, execution_id, request.file_name)
        ctx = PipelineContext(
            request=request,
            paths=paths,
            output_key=output_key,
            execution_id=execution_id,
        )
        log = logger.bind(execution_id=execution_id, source=request.source)

        try:
            paths.prepare()
            steps = self.resolver.resolve(request.source)
            result = await self.engine.run_steps(ctx, steps)
        except PipelineError as exc:
            log.error("Pipeline could not start", error=str(exc))
            return ConversionOutcome(
                success=False,
                source_ref=request.source_ref,
                execution_id=execution_id,
                error=exc,
            )
        except OSError as exc:
            log.error("Scratch directory unavailable", workdir=str(paths.workdir), error=str(exc))
            return ConversionOutcome(
                success=False,
                source_ref=request.source_ref,
                execution_id=execution_id,
                error=PipelineError(
                    f"Scratch directory unavailable: {exc}",
                    execution_id=execution_id,
                ),
            )
        finally:
            self._cleanup(paths)

        log.info(
            "Conversion finished",
            status=result.status,
            duration_ms=result.total_duration_ms,
            summary=result.context_summary,
        )

        if result.succeeded:
            return ConversionOutcome(
                success=True,
                source_ref=request.source_ref,
                execution_id=execution_id,
                converted_ref=ctx.converted_ref,
                output_url=ctx.output_url,
                duration_ms=result.total_duration_ms,
                steps=result.step_results,
            )

        return ConversionOutcome(
            success=False,
            source_ref=request.source_ref,
            execution_id=execution_id,
            error=result.error,
            failed_step=result.failed_step,
            duration_ms=result.total_duration_ms,
            steps=result.step_results,
        )

    async def _notify(self, callback_url: str, outcome: ConversionOutcome) -> None:
        """Best effort: a failing callback is logged, never raised."""
        try:
            await self.notifier.notify(callback_url, outcome.to_notification())
        except NotifyError as exc:
            logger.warning(
                "Callback notification failed",
                execution_id=outcome.execution_id,
                callback_url=callback_url,
                status_code=exc.response_status,
                error=str(exc),
            )

    def _cleanup(self, paths: WorkingPaths) -> None:
        if self.keep_scratch:
            logger.debug("Scratch directory kept", workdir=str(paths.workdir))
            return
        shutil.rmtree(paths.workdir, ignore_errors=True)
