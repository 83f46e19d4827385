"""In-memory TTL cache for play-count records.

Expiry is lazy: a stale entry reads as a miss but stays stored until it is
overwritten or invalidated.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from playrate.core.logger import LogFormat
from playrate.core.models.music import PlayCountRecord

DEFAULT_TTL = timedelta(days=7)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PlayCountCache:
    """Canonical id -> ``PlayCountRecord`` with a time-to-live."""

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the cache.

        Args:
            logger: Optional logger instance
            ttl: Maximum age of a fresh record
            clock: Source of the current time (UTC)

        """
        self.logger = logger or logging.getLogger(__name__)
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, PlayCountRecord] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._stale = 0

    def now(self) -> datetime:
        """Current time according to the cache clock."""
        return self._clock()

    def is_fresh(self, record: PlayCountRecord, now: datetime | None = None) -> bool:
        """Whether ``record`` is within the TTL at ``now``."""
        current = now or self._clock()
        return current - record.captured_at <= self.ttl

    def get(self, track_id: str) -> PlayCountRecord | None:
        """Return the fresh record for ``track_id``, or None on a miss or stale entry."""
        with self._lock:
            record = self._entries.get(track_id)
            if record is None:
                self._misses += 1
                return None
            if not self.is_fresh(record):
                self._stale += 1
                self._misses += 1
                return None
            self._hits += 1
            return record

    def put(self, track_id: str, record: PlayCountRecord) -> bool:
        """Store a record.

        A record captured earlier than the stored one is ignored so that
        ``captured_at`` never moves backwards for an id.

        Returns:
            True if the record was stored

        """
        with self._lock:
            current = self._entries.get(track_id)
            if current is not None and record.captured_at < current.captured_at:
                stored = False
            else:
                self._entries[track_id] = record
                stored = True
        if not stored:
            self.logger.debug("Ignoring out-of-order play count write for %s", track_id)
        return stored

    def invalidate(self, track_id: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        with self._lock:
            removed = self._entries.pop(track_id, None) is not None
        if removed:
            self.logger.debug("Invalidated play count cache entry %s", track_id)
        return removed

    def invalidate_all(self) -> int:
        """Drop every entry. Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        self.logger.info("Cleared %s play count cache entries", LogFormat.number(count))
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        """Hit/miss counters and size."""
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "stale": self._stale,
                "hit_rate": (self._hits / lookups) if lookups else 0.0,
                "ttl_seconds": self.ttl.total_seconds(),
            }
