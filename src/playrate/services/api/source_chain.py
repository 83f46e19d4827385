"""PlayCount Source Chain.

Resolves a canonical track id to a lifetime play count:

1. fresh TTL cache hit, no network;
2. primary provider call by id;
3. secondary provider call by catalog URL;
4. otherwise absent (``None``). Values are never estimated.

Each path retries rate limiting, rejected credentials and transient failures
with a fresh credential and exponential backoff. Failures never escape this
module; a successful value is written through to the cache before returning.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any

from playrate.core.exceptions import (
    CredentialRejectedError,
    MalformedResponseError,
    RateLimitedError,
    RetryExhaustionError,
    UpstreamUnavailableError,
)
from playrate.core.logger import LogFormat, mask_key
from playrate.core.models.music import PlayCountRecord
from playrate.core.retry_handler import RetryAttemptLog, RetryPolicy, calculate_delay_seconds
from playrate.services.api.playcount_client import PlayCountClient
from playrate.services.cache.playcount_cache import PlayCountCache
from playrate.services.credentials.rotator import CredentialRotator

DEFAULT_CATALOG_URL_TEMPLATE = "https://open.spotify.com/track/{id}"
KNOWN_BAD_PLAY_COUNTS: frozenset[int] = frozenset({2_025_000_000})
SUSPICIOUS_REPEAT_THRESHOLD = 3
DEFAULT_BATCH_CONCURRENCY = 4

_TRACK_ID_PATTERN = re.compile(r"/track/([A-Za-z0-9]+)")

CREDENTIAL_ERRORS = (RateLimitedError, CredentialRejectedError)
RETRYABLE_ERRORS = (*CREDENTIAL_ERRORS, UpstreamUnavailableError)

SleepFunc = Callable[[float], Awaitable[Any]]


def extract_track_id(url: str) -> str | None:
    """Extract the canonical id from a catalog URL such as ``.../track/<id>?si=...``."""
    if not url:
        return None
    match = _TRACK_ID_PATTERN.search(url)
    return match[1] if match else None


class PlayCountAnomalyMonitor:
    """Flags play counts that look like provider glitches.

    Flagged values are still returned to callers; the monitor only logs.
    """

    def __init__(
        self,
        error_logger: logging.Logger,
        *,
        known_bad_values: Iterable[int] = KNOWN_BAD_PLAY_COUNTS,
        repeat_threshold: int = SUSPICIOUS_REPEAT_THRESHOLD,
    ) -> None:
        """Initialize the monitor."""
        self.error_logger = error_logger
        self.known_bad_values = frozenset(known_bad_values)
        self.repeat_threshold = repeat_threshold
        self._seen: dict[int, set[str]] = {}
        self._lock = threading.Lock()

    def observe(self, track_id: str, play_count: int) -> bool:
        """Record a value for a track; return True if it looks anomalous."""
        with self._lock:
            ids = self._seen.setdefault(play_count, set())
            ids.add(track_id)
            repeats = len(ids)

        if play_count in self.known_bad_values:
            self.error_logger.warning("Known-bad play count %d returned for track %s", play_count, track_id)
            return True
        if repeats >= self.repeat_threshold:
            self.error_logger.warning(
                "Play count %d seen for %d different tracks (latest %s); provider data may be stale",
                play_count,
                repeats,
                track_id,
            )
            return True
        return False


class PlayCountSourceChain:
    """Cache-first play-count lookup with primary and secondary provider paths."""

    def __init__(
        self,
        client: PlayCountClient,
        rotator: CredentialRotator,
        cache: PlayCountCache,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        *,
        retry_policy: RetryPolicy | None = None,
        catalog_url_template: str = DEFAULT_CATALOG_URL_TEMPLATE,
        anomaly_monitor: PlayCountAnomalyMonitor | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the chain.

        Args:
            client: Provider HTTP client
            rotator: Credential pool
            cache: Play-count TTL cache
            console_logger: Logger for progress
            error_logger: Logger for failures and anomalies
            retry_policy: Attempts and backoff per path
            catalog_url_template: Builds the canonical URL from an id (``{id}``)
            anomaly_monitor: Optional suspicious-value detector
            sleep: Non-blocking delay used for backoff

        """
        self.client = client
        self.rotator = rotator
        self.cache = cache
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.retry_policy = retry_policy or RetryPolicy()
        self.catalog_url_template = catalog_url_template
        self.anomaly_monitor = anomaly_monitor or PlayCountAnomalyMonitor(error_logger)
        self._sleep = sleep

    def build_catalog_url(self, track_id: str) -> str:
        """Canonical catalog URL for the secondary query form."""
        return self.catalog_url_template.format(id=track_id)

    async def fetch(self, track_id: str, canonical_url: str | None = None) -> int | None:
        """Return the lifetime play count for ``track_id``, or None.

        Args:
            track_id: Canonical catalog id
            canonical_url: Catalog URL for the secondary form; built from the id when omitted

        Returns:
            Lifetime play count, or None when every path failed or had no data

        """
        if cached := self.cache.get(track_id):
            self.console_logger.debug("Play count cache hit for %s", track_id)
            return cached.lifetime_count

        if self.rotator.pool_size == 0:
            self.error_logger.warning("No play-count credentials configured; play count for %s unavailable", track_id)
            return None

        value = await self._try_path("primary", track_id, lambda key: self.client.fetch_by_id(track_id, key))
        if value is None:
            url = canonical_url or self.build_catalog_url(track_id)
            value = await self._try_path("secondary", track_id, lambda key: self.client.fetch_by_url(url, key))

        if value is None:
            self.console_logger.info("Play count not available for %s", track_id)
            return None

        self.anomaly_monitor.observe(track_id, value)
        self.cache.put(track_id, PlayCountRecord(id=track_id, lifetime_count=value, captured_at=self.cache.now()))
        self.console_logger.debug("Play count for %s: %s", track_id, LogFormat.number(value))
        return value

    async def fetch_urls(
        self, urls: Sequence[str], *, concurrency: int = DEFAULT_BATCH_CONCURRENCY
    ) -> dict[str, int | None]:
        """Fetch play counts for catalog track URLs concurrently.

        URLs without a recognizable track id map to None without any request.
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def one(url: str) -> int | None:
            track_id = extract_track_id(url)
            if track_id is None:
                self.error_logger.warning("Could not extract a track id from %s", url)
                return None
            async with semaphore:
                return await self.fetch(track_id, url)

        unique_urls = list(dict.fromkeys(urls))
        values = await asyncio.gather(*(one(url) for url in unique_urls))
        return dict(zip(unique_urls, values, strict=True))

    async def _try_path(
        self, path_name: str, track_id: str, call: Callable[[str], Awaitable[int | None]]
    ) -> int | None:
        """Run one path, absorbing exhaustion and malformed responses into None."""
        try:
            return await self._run_with_retry(f"{path_name}:{track_id}", call)
        except RetryExhaustionError as e:
            self.error_logger.warning(
                "[%s] Gave up on %s after %d attempts: %s", path_name, track_id, e.attempts, e.last_error
            )
        except MalformedResponseError as e:
            self.error_logger.warning("[%s] Malformed provider response for %s: %s", path_name, track_id, e)
        return None

    async def _run_with_retry(self, operation_id: str, call: Callable[[str], Awaitable[int | None]]) -> int | None:
        """Call with a freshly acquired credential per attempt.

        A key answered with 429 or 401/403 is marked exhausted so the next
        attempt rotates to another key.

        Raises:
            RetryExhaustionError: If every attempt failed with a retryable error
            MalformedResponseError: If the provider returned an unusable body

        """
        attempt_log = RetryAttemptLog.start(operation_id, self.retry_policy)
        while attempt_log.attempts_left > 0:
            attempt_log.attempt_count += 1
            api_key = self.rotator.acquire()
            if api_key is None:
                break
            try:
                return await call(api_key)
            except RETRYABLE_ERRORS as e:
                attempt_log.last_error = e
                if isinstance(e, CREDENTIAL_ERRORS):
                    self.rotator.mark_exhausted(api_key)
                self.console_logger.debug(
                    "[%s] Attempt %d/%d with key %s failed: %s",
                    operation_id,
                    attempt_log.attempt_count,
                    self.retry_policy.max_attempts,
                    mask_key(api_key),
                    e,
                )
                if attempt_log.attempts_left > 0:
                    await self._sleep(calculate_delay_seconds(attempt_log.attempt_count, self.retry_policy))

        msg = f"{operation_id} failed after {attempt_log.attempt_count} attempts"
        raise RetryExhaustionError(msg, attempt_log.attempt_count, attempt_log.last_error)
