"""Conversion response schemas."""

from __future__ import annotations

from pydantic import BaseModel


class ConversionResponse(BaseModel):
    """Public location of the converted PDF."""

    output_url: str


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx response."""

    error: str
    error_type: str | None = None
    step: str | None = None
