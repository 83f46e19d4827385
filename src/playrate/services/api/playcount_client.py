"""HTTP client for the play-count scraping provider.

One call is one GET. The response is classified into a play count, "no data"
(``None``) or one of the ``PlayCountSourceError`` subclasses; retrying and
credential rotation are the source chain's job.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import aiohttp

from playrate.core.exceptions import (
    CredentialRejectedError,
    MalformedResponseError,
    RateLimitedError,
    UpstreamUnavailableError,
)
from playrate.core.logger import mask_key

HTTP_CLIENT_ERROR = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500
API_RESPONSE_LOG_LIMIT = 500
DEFAULT_TIMEOUT_SECONDS = 30.0


def extract_play_count(payload: Any) -> int | None:
    """Pull ``data.statistics.playCount`` out of a provider response body.

    Args:
        payload: Decoded JSON body

    Returns:
        The play count, or None when the provider reports no data

    Raises:
        MalformedResponseError: If the body does not have the expected shape

    """
    if not isinstance(payload, dict):
        msg = f"Expected a JSON object, got {type(payload).__name__}"
        raise MalformedResponseError(msg)
    if not payload.get("success", False):
        return None

    data = payload.get("data")
    if data is None:
        return None
    if not isinstance(data, dict):
        msg = "'data' is not an object"
        raise MalformedResponseError(msg)
    statistics = data.get("statistics")
    if statistics is None:
        return None
    if not isinstance(statistics, dict):
        msg = "'data.statistics' is not an object"
        raise MalformedResponseError(msg)

    raw = statistics.get("playCount")
    if raw is None:
        return None
    if isinstance(raw, bool):
        msg = "'playCount' is a boolean"
        raise MalformedResponseError(msg)
    try:
        value = int(raw)
    except (TypeError, ValueError) as e:
        msg = f"'playCount' is not an integer: {raw!r}"
        raise MalformedResponseError(msg) from e
    if value < 0:
        msg = f"'playCount' is negative: {value}"
        raise MalformedResponseError(msg)
    return value


class PlayCountClient:
    """Issues single requests against the play-count provider."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        *,
        base_url: str,
        api_key_header: str = "x-api-key",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the client.

        Args:
            session: Shared aiohttp session owned by the container
            console_logger: Logger for debug traces
            error_logger: Logger for warnings
            base_url: Provider track endpoint, without trailing slash
            api_key_header: Header carrying the credential
            timeout_seconds: Total timeout per request

        """
        self.session = session
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.base_url = base_url.rstrip("/")
        self.api_key_header = api_key_header
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.request_count = 0

    async def fetch_by_id(self, track_id: str, api_key: str) -> int | None:
        """Primary form: ``GET {base_url}/{track_id}``."""
        return await self._get(f"{self.base_url}/{track_id}", None, api_key)

    async def fetch_by_url(self, catalog_url: str, api_key: str) -> int | None:
        """Secondary form: ``GET {base_url}?url=<urlencoded catalog URL>``."""
        return await self._get(self.base_url, {"url": catalog_url}, api_key)

    async def _get(self, url: str, params: dict[str, str] | None, api_key: str) -> int | None:
        if self.session is None or self.session.closed:
            msg = "HTTP session not initialized or closed"
            raise UpstreamUnavailableError(msg)

        headers = {self.api_key_header: api_key, "Accept": "application/json"}
        self.request_count += 1
        start_time = time.monotonic()
        try:
            async with self.session.get(url, params=params, headers=headers, timeout=self.timeout) as response:
                status = response.status
                text = await response.text(encoding="utf-8", errors="ignore")
        except TimeoutError as e:
            msg = f"Timed out after {self.timeout.total}s: {url}"
            raise UpstreamUnavailableError(msg) from e
        except aiohttp.ClientError as e:
            msg = f"Connection error for {url}: {e}"
            raise UpstreamUnavailableError(msg) from e

        self.console_logger.debug(
            "[playcount] GET %s%s (key %s) -> %d (%.3fs)",
            url,
            f" url={params['url']}" if params else "",
            mask_key(api_key),
            status,
            time.monotonic() - start_time,
        )
        return self._classify(status, text, url)

    def _classify(self, status: int, text: str, url: str) -> int | None:
        snippet = text[:API_RESPONSE_LOG_LIMIT]
        if status == HTTP_TOO_MANY_REQUESTS:
            msg = f"Rate limited (429) for {url}"
            raise RateLimitedError(msg)
        if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            msg = f"Credential rejected ({status}) for {url}"
            raise CredentialRejectedError(msg)
        if status >= HTTP_SERVER_ERROR:
            msg = f"Provider error {status} for {url}: {snippet}"
            raise UpstreamUnavailableError(msg)
        if status >= HTTP_CLIENT_ERROR:
            self.error_logger.warning("[playcount] Request failed with status %d. URL: %s. Snippet: %s", status, url, snippet)
            return None

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON from {url}: {snippet}"
            raise MalformedResponseError(msg) from e
        return extract_play_count(payload)
