"""Tests for display formatting of play counts and popularity."""

from __future__ import annotations

import pytest

from playrate.core.resolution.formatting import NOT_AVAILABLE, categorize_popularity, format_play_count


@pytest.mark.unit
class TestFormatPlayCount:
    """Tests for format_play_count."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, NOT_AVAILABLE),
            (-1, NOT_AVAILABLE),
            (0, "0"),
            (999, "999"),
            (1000, "1K"),
            (1500, "1.5K"),
            (1050, "1.1K"),
            (999_949, "999.9K"),
            (999_950, "1M"),
            (999_999, "1M"),
            (999_999_999, "1B"),
            (2_000_000, "2M"),
            (2_345_678, "2.3M"),
            (1_250_000_000, "1.3B"),
        ],
    )
    def test_format(self, value: int | None, expected: str) -> None:
        """Counts render with K/M/B suffixes and one decimal."""
        assert format_play_count(value) == expected

    def test_zero_is_distinct_from_absent(self) -> None:
        """'No plays' and 'no data' render differently."""
        assert format_play_count(0) != format_play_count(None)


@pytest.mark.unit
class TestCategorizePopularity:
    """Tests for categorize_popularity."""

    @pytest.mark.parametrize(
        ("popularity", "label"),
        [
            (0, "unpopular"),
            (20, "unpopular"),
            (21, "below average"),
            (40, "below average"),
            (60, "moderately popular"),
            (80, "popular"),
            (81, "very popular"),
            (100, "very popular"),
        ],
    )
    def test_bands(self, popularity: int, label: str) -> None:
        """Scores map onto inclusive upper-bound bands."""
        assert categorize_popularity(popularity) == label
