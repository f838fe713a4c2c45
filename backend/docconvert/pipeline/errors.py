"""
Domain-specific exception hierarchy for the conversion pipeline.

All pipeline exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Each exception carries structured
context (step name, execution ID, etc.) for logging/debugging.

HTTP mapping (see docconvert.api.errors):
    AuthError        → 401
    ValidationError  → 422
    everything else  → 500
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        execution_id: str | None = None,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.message = message
        self.execution_id = execution_id
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class AuthError(PipelineError):
    """The API key header was missing or did not match."""

    status_code = 401


class ValidationError(PipelineError):
    """The trigger payload is missing a required field."""

    status_code = 422


class FetchError(PipelineError):
    """The remote document could not be retrieved."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        **kwargs,
    ) -> None:
        self.url = url
        self.response_status = status_code
        super().__init__(message, **kwargs)


class TransportError(FetchError):
    """Connection-level failure while talking to the remote host."""
    pass


class StorageError(PipelineError):
    """Reading an object from the blob store failed."""
    pass


class ConversionError(PipelineError):
    """The conversion engine rejected or crashed on the input."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str | None = None,
        **kwargs,
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, **kwargs)


class ConversionIncompleteError(ConversionError):
    """The engine reported success but the expected output is missing or empty."""
    pass


class UploadError(PipelineError):
    """Writing the converted object to the blob store failed."""
    pass


class NotifyError(PipelineError):
    """The callback endpoint refused or could not receive the result."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
        response_body: str | None = None,
        **kwargs,
    ) -> None:
        self.response_status = status_code
        self.reason = reason
        self.response_body = response_body
        super().__init__(message, **kwargs)
