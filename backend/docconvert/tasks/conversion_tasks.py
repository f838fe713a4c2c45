"""
Celery tasks — storage-event-triggered conversion.

A message `{bucket, key, acl?, callback_url?}` is converted in place
(key with .pdf, same bucket).  The orchestrator returns an explicit
outcome; this adapter decides what the queue sees:

    success            → task returns the outcome dict
    invalid message    → ValidationError raised, nothing attempted
    pipeline failure   → the pipeline error is raised (task FAILURE),
                         after the optional failure callback was sent

No autoretry: a failed conversion is final.
"""

import asyncio
from typing import Any

import structlog

from docconvert.pipeline.context import ConversionRequest
from docconvert.pipeline.errors import PipelineError
from docconvert.pipeline.orchestrator import ConversionOrchestrator
from docconvert.tasks import celery_app

logger = structlog.get_logger("tasks.conversion")


def build_orchestrator() -> ConversionOrchestrator:
    return ConversionOrchestrator.from_settings()


@celery_app.task(bind=True, name="docconvert.tasks.conversion_tasks.convert_stored_document")
def convert_stored_document(self, message: str | dict[str, Any]) -> dict[str, Any]:
    """
    Convert a blob-store object to PDF next to the original.

    `message` is the queue message body, either raw JSON or a dict.
    """
    task_log = logger.bind(task_id=self.request.id)

    try:
        request = ConversionRequest.from_queue_message(message)
    except PipelineError as exc:
        task_log.error("Invalid conversion message", error=str(exc), details=exc.details)
        raise

    task_log = task_log.bind(bucket=request.bucket, key=request.key, acl=str(request.acl))
    task_log.info("Conversion task started", has_callback=request.callback_url is not None)

    orchestrator = build_orchestrator()
    outcome = asyncio.run(orchestrator.convert_from_storage(request))

    if not outcome.success:
        task_log.error(
            "Conversion task failed",
            execution_id=outcome.execution_id,
            failed_step=outcome.failed_step,
            error=str(outcome.error),
        )
        raise outcome.error

    task_log.info(
        "Conversion task finished",
        execution_id=outcome.execution_id,
        converted_file=outcome.converted_ref,
    )
    return outcome.to_dict()
