"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from docconvert.api.errors import register_exception_handlers
from docconvert.api.v1 import conversions
from docconvert.core.config import settings
from docconvert.core.logging import get_logger, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    setup_logging("DEBUG" if settings.APP_ENV == "development" else "INFO")
    logger = get_logger("startup")
    logger.info("Application starting", env=settings.APP_ENV, bucket=settings.BUCKET)
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="Document Conversion API",
    description="Office document to PDF conversion service",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

API_PREFIX = "/api/v1"
app.include_router(conversions.router, prefix=API_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Public health-check endpoint."""
    return {"status": "ok", "env": settings.APP_ENV}
