"""Shared constants and enums used across the application."""

from enum import StrEnum

API_KEY_HEADER = "X-API-KEY"

PDF_CONTENT_TYPE = "application/pdf"
PDF_EXTENSION = ".pdf"

# ~10 years; converted files are never rewritten under the same URL flow key
CACHE_CONTROL = "max-age=314496000,immutable"

URL_CONVERSIONS_PREFIX = "conversions"

AUTH_ERROR_MESSAGE = "Authentication credentials were missing or incorrect"
VALIDATION_ERROR_MESSAGE = "Validation error"
REDACTED_ERROR_MESSAGE = "Document conversion failed"


class PipelineStatus(StrEnum):
    """Overall status of a pipeline execution."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepStatus(StrEnum):
    """Status of an individual pipeline step."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ObjectACL(StrEnum):
    """Canned ACLs accepted for converted objects."""

    PUBLIC_READ = "public-read"
    PRIVATE = "private"


class UrlScheme(StrEnum):
    """Transport selected for a remote fetch."""

    SECURE = "https"
    INSECURE = "http"


class TriggerSource(StrEnum):
    """Which entry flow produced a conversion request."""

    URL = "URL"
    STORAGE = "STORAGE"
