"""
Remote Fetcher — streams a document from an http(s) URL into scratch storage.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

import httpx

from docconvert.core.constants import UrlScheme
from docconvert.core.logging import get_logger
from docconvert.pipeline.errors import FetchError, TransportError

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FetchedFile:
    """Metadata captured from the remote response."""

    mime: str | None
    size_bytes: int


def parse_scheme(url: str) -> UrlScheme:
    """Classify `url` as secure or insecure; anything else is a FetchError."""
    parts = urlsplit(url)
    try:
        scheme = UrlScheme(parts.scheme.lower())
    except ValueError:
        raise FetchError(
            f"Unsupported URL scheme '{parts.scheme}' in '{url}'",
            url=url,
        ) from None
    if not parts.netloc:
        raise FetchError(f"URL '{url}' has no host", url=url)
    return scheme


class RemoteFetcher:
    """
    Downloads arbitrary URLs with httpx.

    A client can be injected (tests pass one built on httpx.MockTransport);
    otherwise one is created per fetch.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch(self, url: str, destination: str | Path) -> FetchedFile:
        """
        Stream `url` to `destination`.

        Raises:
            FetchError: unsupported or malformed URL, or a non-200 response.
            TransportError: connection-level failure.
        """
        scheme = parse_scheme(url)
        destination = Path(destination)
        log = logger.bind(url=url, scheme=scheme, destination=str(destination))

        if self._client is not None:
            return await self._fetch_with(self._client, url, destination, log)

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._fetch_with(client, url, destination, log)

    async def _fetch_with(
        self,
        client: httpx.AsyncClient,
        url: str,
        destination: Path,
        log,
    ) -> FetchedFile:
        opened = False
        try:
            async with client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise FetchError(
                        f"Failed to get '{url}' ({response.status_code})",
                        url=url,
                        status_code=response.status_code,
                    )

                mime = response.headers.get("content-type")
                written = 0
                opened = True
                with open(destination, "wb") as fh:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        fh.write(chunk)
                        written += len(chunk)

        except FetchError:
            self._discard(destination, opened, log)
            raise
        except httpx.TransportError as exc:
            self._discard(destination, opened, log)
            raise TransportError(
                f"Failed to get '{url}': {exc}",
                url=url,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            self._discard(destination, opened, log)
            raise FetchError(f"Failed to get '{url}': {exc}", url=url) from exc

        size = _content_length(response.headers.get("content-length"), written)
        log.info("Remote file fetched", mime=mime, size_bytes=size)
        return FetchedFile(mime=mime, size_bytes=size)

    @staticmethod
    def _discard(destination: Path, opened: bool, log) -> None:
        """Remove a partially written download."""
        if opened and destination.exists():
            os.remove(destination)
            log.info("Partial download removed")


def _content_length(header: str | None, written: int) -> int:
    if header is None:
        return written
    try:
        return int(header)
    except ValueError:
        return written
