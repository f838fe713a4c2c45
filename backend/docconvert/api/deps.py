"""Shared dependencies for API routes."""

from __future__ import annotations

import secrets
from functools import lru_cache

from fastapi import Header

from docconvert.core.config import settings
from docconvert.core.constants import API_KEY_HEADER, AUTH_ERROR_MESSAGE
from docconvert.pipeline.errors import AuthError
from docconvert.pipeline.orchestrator import ConversionOrchestrator


async def require_api_key(
    api_key: str | None = Header(default=None, alias=API_KEY_HEADER),
) -> None:
    """Reject the request unless X-API-KEY equals the configured secret."""
    expected = settings.API_KEY
    if not api_key or not expected or not secrets.compare_digest(api_key, expected):
        raise AuthError(AUTH_ERROR_MESSAGE)


@lru_cache
def get_orchestrator() -> ConversionOrchestrator:
    """Process-wide orchestrator built from settings (overridden in tests)."""
    return ConversionOrchestrator.from_settings(settings)
