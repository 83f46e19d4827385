"""Retry policy with exponential backoff.

Provides the policy object and delay arithmetic shared by every retrying
upstream path. Waiting itself is always done with ``asyncio.sleep`` by the
caller so a cancelled request stops retrying immediately.
"""

from __future__ import annotations

from dataclasses import dataclass

BACKOFF_FACTOR = 2


@dataclass(frozen=True)
class RetryPolicy:
    """Attempts and base delay for one retrying path.

    ``max_attempts`` counts total attempts, including the first one.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 2.0

    def __post_init__(self) -> None:
        """Validate policy values."""
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)
        if self.base_delay_seconds < 0:
            msg = "base_delay_seconds must be non-negative"
            raise ValueError(msg)


def calculate_delay_seconds(attempt_number: int, policy: RetryPolicy) -> float:
    """Delay after failed attempt ``attempt_number`` (1-based).

    ``base * 2 ** (attempt - 1)``: 2s then 4s with the default policy.
    """
    return policy.base_delay_seconds * BACKOFF_FACTOR ** max(0, attempt_number - 1)


@dataclass
class RetryAttemptLog:
    """Bookkeeping for one retrying path, used for diagnostics."""

    operation_id: str
    policy: RetryPolicy
    attempt_count: int = 0
    last_error: Exception | None = None

    @classmethod
    def start(cls, operation_id: str, policy: RetryPolicy) -> RetryAttemptLog:
        """Create an empty log for ``operation_id``."""
        return cls(operation_id=operation_id, policy=policy)

    @property
    def attempts_left(self) -> int:
        """Attempts still allowed under the policy."""
        return max(0, self.policy.max_attempts - self.attempt_count)
