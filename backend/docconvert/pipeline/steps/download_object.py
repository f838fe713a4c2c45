"""
DownloadObjectStep — pulls the source document out of the blob store.

Storage flow only: the queue message names the bucket and key, the
object is streamed into the invocation's input path.
"""

from __future__ import annotations

import os

from docconvert.core.logging import get_logger
from docconvert.pipeline.context import PipelineContext, StepResult
from docconvert.pipeline.step import PipelineStep
from docconvert.storage.blob_store import BlobStore

logger = get_logger(__name__)


class DownloadObjectStep(PipelineStep):
    """Download the source object from S3/MinIO to scratch storage."""

    name = "download_object"
    description = "Download source document from object storage"

    def __init__(self, store: BlobStore) -> None:
        self._store = store

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        request = ctx.request

        local_path = await self._store.download(request.bucket, request.key, ctx.paths.input_path)
        ctx.source_size_bytes = local_path.stat().st_size

        return self._success(started_at, metadata={
            "bucket": request.bucket,
            "key": request.key,
            "local_path": str(local_path),
            "size_bytes": ctx.source_size_bytes,
        })

    async def rollback(self, ctx: PipelineContext) -> None:
        """Clean up a partially written input file."""
        if ctx.paths.input_path.exists():
            os.remove(ctx.paths.input_path)
            logger.info("Temp file cleaned up", path=str(ctx.paths.input_path))
