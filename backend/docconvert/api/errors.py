"""
Exception handlers — render pipeline errors as `{"error": ...}` JSON.

    AuthError                → 401 {"error": "Authentication credentials ..."}
    ValidationError          → 422 {"error": "Validation error"}
    RequestValidationError   → 422 {"error": "Validation error"}
    other PipelineError      → 500 {"error", "error_type", "step"}
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docconvert.api.schemas import ErrorResponse
from docconvert.core.config import settings
from docconvert.core.constants import (
    AUTH_ERROR_MESSAGE,
    REDACTED_ERROR_MESSAGE,
    VALIDATION_ERROR_MESSAGE,
)
from docconvert.core.logging import get_logger
from docconvert.pipeline.errors import AuthError, PipelineError, ValidationError

logger = get_logger(__name__)


def error_response(exc: PipelineError) -> JSONResponse:
    """Map a pipeline error onto its HTTP status and JSON body."""
    if isinstance(exc, AuthError):
        body = ErrorResponse(error=AUTH_ERROR_MESSAGE)
    elif isinstance(exc, ValidationError):
        body = ErrorResponse(error=VALIDATION_ERROR_MESSAGE)
    else:
        message = str(exc) if settings.EXPOSE_ERROR_DETAILS else REDACTED_ERROR_MESSAGE
        body = ErrorResponse(
            error=message,
            error_type=type(exc).__name__,
            step=exc.step_name,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    logger.warning(
        "Request rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(ValidationError(str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
