"""FetchRemoteStep — downloads the source document from its URL (URL flow)."""

from __future__ import annotations

from docconvert.ingestion.remote_fetcher import RemoteFetcher
from docconvert.pipeline.context import PipelineContext, StepResult
from docconvert.pipeline.step import PipelineStep


class FetchRemoteStep(PipelineStep):
    """Stream the document at ctx.request.url into scratch storage."""

    name = "fetch_remote"
    description = "Fetch source document from URL"

    def __init__(self, fetcher: RemoteFetcher) -> None:
        self._fetcher = fetcher

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()

        fetched = await self._fetcher.fetch(ctx.request.url, ctx.paths.input_path)
        ctx.source_mime = fetched.mime
        ctx.source_size_bytes = fetched.size_bytes

        return self._success(started_at, metadata={
            "url": ctx.request.url,
            "mime": fetched.mime,
            "size_bytes": fetched.size_bytes,
        })
