"""API schema package."""

from docconvert.api.schemas.conversions import ConversionResponse, ErrorResponse

__all__ = ["ConversionResponse", "ErrorResponse"]
