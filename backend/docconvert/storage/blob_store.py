"""
Blob store client — S3/MinIO access through boto3.

boto3 is blocking, so every call is pushed to a worker thread with
asyncio.to_thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from docconvert.core.config import Settings, settings
from docconvert.core.constants import CACHE_CONTROL, PDF_CONTENT_TYPE, ObjectACL
from docconvert.core.logging import get_logger
from docconvert.pipeline.errors import StorageError, UploadError

logger = get_logger(__name__)


def build_s3_client(config: Settings = settings) -> Any:
    """Create a boto3 S3 client from application settings."""
    kwargs: dict[str, Any] = {"region_name": config.AWS_REGION}
    if config.STORAGE_ENDPOINT:
        kwargs["endpoint_url"] = config.STORAGE_ENDPOINT
    if config.AWS_ACCESS_KEY_ID and config.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = config.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = config.AWS_SECRET_ACCESS_KEY
    return boto3.client("s3", **kwargs)


class BlobStore:
    """Get/put objects by bucket + key, streaming to and from local files."""

    def __init__(
        self,
        client: Any = None,
        *,
        region: str = settings.AWS_REGION,
        endpoint: str = settings.STORAGE_ENDPOINT,
        public_base_url: str = settings.STORAGE_PUBLIC_BASE_URL,
    ) -> None:
        self._client = client if client is not None else build_s3_client()
        self._region = region
        self._endpoint = endpoint.rstrip("/")
        self._public_base_url = public_base_url.rstrip("/")

    # ─── Download ──────────────────────────────────────

    async def download(self, bucket: str, key: str, destination: str | Path) -> Path:
        """
        Stream s3://bucket/key into `destination`.

        Returns only once the local file is closed, so every byte is on
        disk before the caller moves on.
        """
        destination = Path(destination)
        try:
            await asyncio.to_thread(self._download_sync, bucket, key, destination)
        except (BotoCoreError, ClientError, OSError) as exc:
            if destination.exists():
                os.remove(destination)
            logger.error("Object download failed", bucket=bucket, key=key, error=str(exc))
            raise StorageError(
                f"Failed to download s3://{bucket}/{key}: {exc}",
                details={"bucket": bucket, "key": key},
            ) from exc

        logger.info(
            "Object downloaded",
            bucket=bucket,
            key=key,
            local_path=str(destination),
            size_bytes=destination.stat().st_size,
        )
        return destination

    def _download_sync(self, bucket: str, key: str, destination: Path) -> None:
        with open(destination, "wb") as fh:
            self._client.download_fileobj(bucket, key, fh)

    # ─── Upload ────────────────────────────────────────

    async def upload(
        self,
        bucket: str,
        key: str,
        source: str | Path,
        acl: ObjectACL | str,
    ) -> str:
        """Stream a local PDF into s3://bucket/key; return its public location."""
        extra_args = {
            "ACL": str(acl),
            "CacheControl": CACHE_CONTROL,
            "ContentType": PDF_CONTENT_TYPE,
        }
        try:
            await asyncio.to_thread(self._upload_sync, bucket, key, Path(source), extra_args)
        except (BotoCoreError, ClientError, OSError) as exc:
            logger.error("Object upload failed", bucket=bucket, key=key, error=str(exc))
            raise UploadError(
                f"Failed to upload s3://{bucket}/{key}: {exc}",
                details={"bucket": bucket, "key": key},
            ) from exc

        location = self.public_url(bucket, key)
        logger.info("Object uploaded", bucket=bucket, key=key, acl=str(acl), location=location)
        return location

    def _upload_sync(
        self,
        bucket: str,
        key: str,
        source: Path,
        extra_args: dict[str, str],
    ) -> None:
        with open(source, "rb") as fh:
            self._client.upload_fileobj(fh, bucket, key, ExtraArgs=extra_args)

    # ─── Locations ─────────────────────────────────────

    def public_url(self, bucket: str, key: str) -> str:
        """Public location of an object, mirroring what S3 reports as Location."""
        quoted = quote(key, safe="/")
        if self._public_base_url:
            return f"{self._public_base_url}/{quoted}"
        if self._endpoint:
            return f"{self._endpoint}/{bucket}/{quoted}"
        return f"https://{bucket}.s3.{self._region}.amazonaws.com/{quoted}"
