"""UploadObjectStep — persists the converted PDF in the blob store."""

from __future__ import annotations

from docconvert.pipeline.context import PipelineContext, StepResult
from docconvert.pipeline.step import PipelineStep
from docconvert.storage.blob_store import BlobStore


class UploadObjectStep(PipelineStep):
    """Upload ctx.paths.output_path to {request.bucket}/{ctx.output_key}."""

    name = "upload_object"
    description = "Upload converted PDF to object storage"

    def __init__(self, store: BlobStore) -> None:
        self._store = store

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        request = ctx.request

        ctx.output_url = await self._store.upload(
            request.bucket,
            ctx.output_key,
            ctx.paths.output_path,
            request.acl,
        )

        return self._success(started_at, metadata={
            "bucket": request.bucket,
            "key": ctx.output_key,
            "acl": str(request.acl),
            "location": ctx.output_url,
        })
