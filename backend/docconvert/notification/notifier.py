"""HTTP client for job-result callbacks."""

from __future__ import annotations

from typing import Any

import httpx

from docconvert.core.logging import get_logger
from docconvert.pipeline.errors import NotifyError

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class Notifier:
    """POSTs a JSON result payload to a caller-supplied callback URL."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def notify(
        self,
        callback_url: str,
        payload: dict[str, Any],
        extra_headers: dict[str, str] | None = None,
    ) -> str:
        """
        POST `payload` to `callback_url`.  Returns the response body.

        Raises NotifyError on status >= 400, an unusable URL or a transport failure.
        """
        headers = {**DEFAULT_HEADERS, **(extra_headers or {})}

        try:
            if self._client is not None:
                response = await self._client.post(callback_url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(callback_url, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NotifyError(f"Callback to '{callback_url}' failed: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "Callback rejected",
                callback_url=callback_url,
                status_code=response.status_code,
                body=response.text,
            )
            raise NotifyError(
                f"Callback to '{callback_url}' returned "
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                response_body=response.text,
            )

        logger.info(
            "Callback delivered",
            callback_url=callback_url,
            status_code=response.status_code,
            success=payload.get("success"),
        )
        return response.text
