"""Credential Rotator for the rate-limited play-count provider.

Keeps per-key usage counters with a reset window and hands out the next usable
key. When every key is over its daily limit the least-recently-used key is
returned anyway (degraded mode); exhaustion never fails a request by itself.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from playrate.core.logger import LogFormat, mask_key
from playrate.core.models.music import CredentialState

DEFAULT_DAILY_LIMIT = 10
DEFAULT_RESET_WINDOW = timedelta(hours=24)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CredentialRotator:
    """Thread-safe selector over a pool of API keys.

    The lock guards only in-memory bookkeeping and is never held while a
    caller performs network I/O with the returned key.
    """

    def __init__(
        self,
        keys: Sequence[str],
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        *,
        daily_limit: int = DEFAULT_DAILY_LIMIT,
        reset_window: timedelta = DEFAULT_RESET_WINDOW,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the rotator.

        Args:
            keys: API keys in priority order; duplicates and blanks are dropped
            console_logger: Logger for user-facing status
            error_logger: Logger for degraded-mode warnings
            daily_limit: Requests per key per reset window
            reset_window: Idle time after which a key's counter resets
            clock: Source of the current time (UTC)

        """
        if daily_limit < 1:
            msg = "daily_limit must be at least 1"
            raise ValueError(msg)
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.daily_limit = daily_limit
        self.reset_window = reset_window
        self._clock = clock
        self._keys: tuple[str, ...] = tuple(dict.fromkeys(k.strip() for k in keys if k and k.strip()))
        self._states: dict[str, CredentialState] = {}
        self._lock = threading.Lock()
        self._total_acquisitions = 0
        self._degraded_acquisitions = 0

    @property
    def pool_size(self) -> int:
        """Number of distinct configured keys."""
        return len(self._keys)

    def acquire(self) -> str | None:
        """Select the next key.

        Returns:
            A key, or None when the pool is empty

        """
        if not self._keys:
            self.error_logger.warning("No play-count API keys configured")
            return None

        degraded_key: str | None = None
        with self._lock:
            now = self._clock()
            self._total_acquisitions += 1
            for key in self._keys:
                state = self._states.get(key)
                if state is None:
                    self._states[key] = CredentialState(key=key, usage_count=1, last_used=now)
                    return key
                if now - state.last_used >= self.reset_window:
                    state.usage_count = 1
                    state.last_used = now
                    return key
                if state.usage_count < self.daily_limit:
                    state.usage_count += 1
                    state.last_used = now
                    return key

            # Every key is over the limit: fall back to the least recently used one
            lru = min(self._states.values(), key=lambda s: s.last_used)
            lru.usage_count += 1
            lru.last_used = now
            self._degraded_acquisitions += 1
            degraded_key = lru.key
            usage = lru.usage_count

        self.error_logger.warning(
            "All %d API keys reached the daily limit of %d; reusing least recently used key %s (usage %d)",
            len(self._keys),
            self.daily_limit,
            mask_key(degraded_key),
            usage,
        )
        return degraded_key

    def mark_exhausted(self, key: str) -> None:
        """Take a rate-limited or rejected key out of rotation until its window resets.

        The key's counter is raised to ``daily_limit`` so ``acquire`` moves on
        to the next key in the pool.
        """
        with self._lock:
            state = self._states.get(key)
            if state is None:
                return
            state.usage_count = max(state.usage_count, self.daily_limit)
        self.console_logger.debug("Key %s marked exhausted", mask_key(key))

    def snapshot(self) -> list[CredentialState]:
        """Return copies of the current key states in pool order."""
        with self._lock:
            return [
                CredentialState(key=s.key, usage_count=s.usage_count, last_used=s.last_used)
                for key in self._keys
                if (s := self._states.get(key)) is not None
            ]

    def get_stats(self) -> dict[str, Any]:
        """Usage statistics with masked keys."""
        with self._lock:
            usage = {
                mask_key(key): (self._states[key].usage_count if key in self._states else 0) for key in self._keys
            }
            return {
                "pool_size": len(self._keys),
                "daily_limit": self.daily_limit,
                "total_acquisitions": self._total_acquisitions,
                "degraded_acquisitions": self._degraded_acquisitions,
                "usage": usage,
            }

    def reset(self) -> None:
        """Forget all usage bookkeeping."""
        with self._lock:
            self._states.clear()
            self._total_acquisitions = 0
            self._degraded_acquisitions = 0
        self.console_logger.debug("%s state reset", LogFormat.entity("CredentialRotator"))
