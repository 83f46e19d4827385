"""Tests for retry policy and backoff arithmetic."""

from __future__ import annotations

import pytest

from playrate.core.retry_handler import RetryAttemptLog, RetryPolicy, calculate_delay_seconds


@pytest.mark.unit
class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_default_values(self) -> None:
        """Three attempts with a two second base."""
        policy = RetryPolicy()

        assert policy.max_attempts == 3
        assert policy.base_delay_seconds == 2.0

    @pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"base_delay_seconds": -1}])
    def test_invalid_values(self, kwargs: dict[str, float]) -> None:
        """Out-of-range settings are rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)  # type: ignore[arg-type]


@pytest.mark.unit
class TestCalculateDelay:
    """Tests for calculate_delay_seconds."""

    def test_default_backoff_sequence(self) -> None:
        """Delays are 2s, 4s, 8s for successive failures."""
        policy = RetryPolicy()

        assert [calculate_delay_seconds(n, policy) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_zero_base_never_waits(self) -> None:
        """A zero base delay disables backoff entirely."""
        policy = RetryPolicy(base_delay_seconds=0)

        assert calculate_delay_seconds(5, policy) == 0


@pytest.mark.unit
class TestRetryAttemptLog:
    """Tests for RetryAttemptLog."""

    def test_attempts_left(self) -> None:
        """Attempts left counts down to zero."""
        log = RetryAttemptLog.start("op", RetryPolicy(max_attempts=2))

        assert log.attempts_left == 2
        log.attempt_count = 2
        assert log.attempts_left == 0
