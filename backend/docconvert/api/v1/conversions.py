"""
Conversion endpoints — URL-triggered flow.

    POST /conversions/url   X-API-KEY: <secret>   {"url": "..."}

Auth is a route dependency, so it is checked before the body is read:
an unauthenticated caller gets 401 even with a malformed body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from docconvert.api.deps import get_orchestrator, require_api_key
from docconvert.api.errors import error_response
from docconvert.api.schemas import ConversionResponse, ErrorResponse
from docconvert.core.config import settings
from docconvert.core.logging import get_logger
from docconvert.pipeline.context import ConversionRequest
from docconvert.pipeline.errors import ValidationError
from docconvert.pipeline.orchestrator import ConversionOrchestrator

logger = get_logger(__name__)

router = APIRouter(
    prefix="/conversions",
    tags=["Conversions"],
    dependencies=[Depends(require_api_key)],
)


@router.post(
    "/url",
    response_model=ConversionResponse,
    responses={
        401: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def convert_from_url(
    request: Request,
    orchestrator: ConversionOrchestrator = Depends(get_orchestrator),
):
    """
    Fetch the document at `url`, convert it to PDF and store it publicly.

    Returns `{"output_url": ...}` pointing at
    conversions/{epoch ms}/{name}.pdf in the configured bucket.
    """
    try:
        payload = await request.json()
    except ValueError as exc:
        raise ValidationError(f"Body is not valid JSON: {exc}") from exc

    conversion = ConversionRequest.from_url_payload(payload, bucket=settings.BUCKET)
    outcome = await orchestrator.convert_from_url(conversion)

    if not outcome.success:
        logger.error(
            "URL conversion failed",
            execution_id=outcome.execution_id,
            url=conversion.url,
            failed_step=outcome.failed_step,
            error=str(outcome.error),
        )
        return error_response(outcome.error)

    logger.info(
        "URL conversion succeeded",
        execution_id=outcome.execution_id,
        url=conversion.url,
        output_url=outcome.output_url,
    )
    return ConversionResponse(output_url=outcome.output_url)
