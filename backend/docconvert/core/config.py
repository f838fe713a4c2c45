"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

import tempfile

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Application ───────────────────────────
    APP_ENV: str = "development"

    # ── HTTP trigger auth ─────────────────────
    # Shared secret compared against the X-API-KEY header.
    # Left empty, every request is rejected.
    API_KEY: str = ""
    EXPOSE_ERROR_DETAILS: bool = True

    # ── Redis / Celery ────────────────────────
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # ── Object Storage ────────────────────────
    BUCKET: str = "office-file-processor"
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    STORAGE_ENDPOINT: str = ""
    STORAGE_PUBLIC_BASE_URL: str = ""

    # ── Scratch storage ───────────────────────
    SCRATCH_DIR: str = tempfile.gettempdir()
    KEEP_SCRATCH: bool = False

    # ── Conversion engine ─────────────────────
    SOFFICE_BINARY: str = "soffice"
    CONVERSION_TIMEOUT_SECONDS: float | None = None

    # ── Outbound HTTP ─────────────────────────
    FETCH_TIMEOUT_SECONDS: float | None = None
    NOTIFY_TIMEOUT_SECONDS: float | None = None

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
