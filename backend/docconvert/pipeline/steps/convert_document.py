"""
ConvertDocumentStep — runs the conversion engine on the materialised input.

The engine's exit status alone is not trusted: before the upload step
runs, the expected PDF must exist and be non-empty, otherwise the step
fails with ConversionIncompleteError.
"""

from __future__ import annotations

from docconvert.core.logging import get_logger
from docconvert.pipeline.context import PipelineContext, StepResult
from docconvert.pipeline.errors import ConversionIncompleteError
from docconvert.pipeline.step import PipelineStep
from docconvert.processing.converter import DEFAULT_TARGET_FORMAT, LibreOfficeConverter

logger = get_logger(__name__)


class ConvertDocumentStep(PipelineStep):
    """Convert ctx.paths.input_path to PDF at ctx.paths.output_path."""

    name = "convert_document"
    description = "Convert document to PDF"

    def __init__(self, converter: LibreOfficeConverter) -> None:
        self._converter = converter

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        paths = ctx.paths

        produced = await self._converter.convert(
            paths.input_path,
            paths.output_dir,
            DEFAULT_TARGET_FORMAT,
        )
        if produced != paths.output_path:
            logger.warning(
                "Engine output name differs from expected",
                produced=str(produced),
                expected=str(paths.output_path),
            )

        output = paths.output_path
        if not output.is_file():
            raise ConversionIncompleteError(
                f"Conversion produced no output at '{output.name}'",
                details={"expected": str(output)},
            )

        size = output.stat().st_size
        if size == 0:
            raise ConversionIncompleteError(
                f"Conversion produced an empty file '{output.name}'",
                details={"expected": str(output)},
            )

        ctx.output_size_bytes = size
        return self._success(started_at, metadata={
            "output_path": str(output),
            "size_bytes": size,
        })
