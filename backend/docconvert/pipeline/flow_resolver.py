"""
FlowResolver — maps a trigger source to its ordered step sequence.

    URL flow:      fetch_remote    → convert_document → upload_object
    Storage flow:  download_object → convert_document → upload_object

Notification is not a step: it happens after the flow has produced
its single outcome, so a failing callback can never fail the flow.
"""

from __future__ import annotations

from docconvert.core.constants import TriggerSource
from docconvert.core.logging import get_logger
from docconvert.ingestion.remote_fetcher import RemoteFetcher
from docconvert.pipeline.errors import PipelineError
from docconvert.pipeline.step import PipelineStep
from docconvert.pipeline.steps.convert_document import ConvertDocumentStep
from docconvert.pipeline.steps.download_object import DownloadObjectStep
from docconvert.pipeline.steps.fetch_remote import FetchRemoteStep
from docconvert.pipeline.steps.upload_object import UploadObjectStep
from docconvert.processing.converter import LibreOfficeConverter
from docconvert.storage.blob_store import BlobStore

logger = get_logger(__name__)


class FlowResolver:
    """Builds step lists from the collaborators they share."""

    def __init__(
        self,
        store: BlobStore,
        fetcher: RemoteFetcher,
        converter: LibreOfficeConverter,
    ) -> None:
        self.store = store
        self.fetcher = fetcher
        self.converter = converter

    def url_flow(self) -> list[PipelineStep]:
        return [
            FetchRemoteStep(self.fetcher),
            ConvertDocumentStep(self.converter),
            UploadObjectStep(self.store),
        ]

    def storage_flow(self) -> list[PipelineStep]:
        return [
            DownloadObjectStep(self.store),
            ConvertDocumentStep(self.converter),
            UploadObjectStep(self.store),
        ]

    def resolve(self, source: TriggerSource) -> list[PipelineStep]:
        if source == TriggerSource.URL:
            steps = self.url_flow()
        elif source == TriggerSource.STORAGE:
            steps = self.storage_flow()
        else:
            raise PipelineError(f"No flow registered for trigger source '{source}'")

        logger.debug("Flow resolved", source=source, steps=[s.name for s in steps])
        return steps
