"""Tests for play-count annualization."""

from __future__ import annotations

from datetime import date, timedelta

import allure
import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from playrate.core.models.music import ReleaseDatePrecision
from playrate.core.resolution.annualizer import (
    annualize,
    annualize_record,
    infer_precision,
    resolve_reference_date,
)

TODAY = date(2025, 6, 15)


@pytest.mark.unit
@allure.epic("playrate")
@allure.feature("Annualizer")
class TestAnnualize:
    """Tests for annualize and annualize_record."""

    @allure.title("One year old track is scaled by 365.25/365")
    def test_one_year_old(self) -> None:
        """3652 plays over 365 days is 3655 plays per 365.25 days."""
        released = (TODAY - timedelta(days=365)).isoformat()

        assert annualize(3652, released, "day", today=TODAY) == 3655

    def test_released_today_counts_as_one_day(self) -> None:
        """Age is floored at one day."""
        record = annualize_record(100, TODAY.isoformat(), ReleaseDatePrecision.DAY, today=TODAY)

        assert record is not None
        assert record.age_in_days == 1
        assert record.annual_rate == 36525

    def test_future_release_date_floors_at_one_day(self) -> None:
        """A release date after today is treated as one day old."""
        record = annualize_record(10, "2030-01-01", "day", today=TODAY)

        assert record is not None
        assert record.age_in_days == 1

    def test_absent_count_stays_absent(self) -> None:
        """An unknown count is never turned into zero."""
        assert annualize(None, "2020-01-01", "day", today=TODAY) is None
        assert annualize_record(None, "2020-01-01", "day", today=TODAY) is None

    @pytest.mark.parametrize("count", [0, -5])
    def test_non_positive_count_unchanged(self, count: int) -> None:
        """Zero stays zero; negative counts are passed through."""
        assert annualize(count, "2020-01-01", "day", today=TODAY) == count

    @pytest.mark.parametrize(
        ("release_date", "precision"),
        [("not-a-date", "day"), ("2020-02-30", "day"), ("2020", "day"), (None, "day"), ("", None)],
    )
    def test_unusable_date_returns_count_unchanged(self, release_date: str | None, precision: str | None) -> None:
        """An uninterpretable release date does not extrapolate."""
        assert annualize(5000, release_date, precision, today=TODAY) == 5000
        assert annualize_record(5000, release_date, precision, today=TODAY) is None

    def test_month_precision_uses_first_of_month(self) -> None:
        """Month precision measures from the first of the month."""
        record = annualize_record(1000, "2025-05", "month", today=TODAY)

        assert record is not None
        assert record.age_in_days == (TODAY - date(2025, 5, 1)).days

    def test_year_precision_uses_january_first(self) -> None:
        """Year precision measures from January 1."""
        record = annualize_record(1000, "2024", "year", today=TODAY)

        assert record is not None
        assert record.age_in_days == (TODAY - date(2024, 1, 1)).days

    def test_coarse_precision_ignores_extra_components(self) -> None:
        """A full date with year precision is measured from January 1."""
        record = annualize_record(1000, "2024-08-20", "year", today=TODAY)

        assert record is not None
        assert record.age_in_days == (TODAY - date(2024, 1, 1)).days

    def test_missing_precision_is_inferred(self) -> None:
        """Precision is inferred from the date shape when absent."""
        assert annualize(1000, "2024-06-15", None, today=TODAY) == annualize(1000, "2024-06-15", "day", today=TODAY)

    def test_rounds_half_up(self) -> None:
        """A rate of exactly .5 rounds up."""
        record = annualize_record(2, TODAY.isoformat(), "day", today=TODAY)

        assert record is not None
        assert record.annual_rate == 731


@pytest.mark.unit
class TestReferenceDate:
    """Tests for resolve_reference_date and infer_precision."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-03-01", ReleaseDatePrecision.DAY),
            ("2024-03", ReleaseDatePrecision.MONTH),
            ("2024", ReleaseDatePrecision.YEAR),
            ("March 2024", None),
            (None, None),
        ],
    )
    def test_infer_precision(self, value: str | None, expected: ReleaseDatePrecision | None) -> None:
        """Precision follows the YYYY[-MM[-DD]] shape."""
        assert infer_precision(value) is expected

    def test_unknown_precision_string_is_inferred(self) -> None:
        """An unrecognized precision label falls back to inference."""
        assert resolve_reference_date("2024-03-09", "week") == date(2024, 3, 9)

    def test_day_precision_requires_full_date(self) -> None:
        """Day precision with only a month is unusable."""
        assert resolve_reference_date("2024-03", "day") is None

    def test_invalid_month(self) -> None:
        """Month 13 is unusable."""
        assert resolve_reference_date("2024-13", "month") is None


@pytest.mark.unit
class TestAnnualizeProperties:
    """Property-based tests for annualize."""

    @given(
        count=st.integers(min_value=1, max_value=10**12),
        age=st.integers(min_value=1, max_value=20_000),
    )
    @settings(max_examples=200)
    def test_rate_matches_formula(self, count: int, age: int) -> None:
        """The rate is count / age * 365.25 to the nearest integer."""
        released = (TODAY - timedelta(days=age)).isoformat()

        rate = annualize(count, released, "day", today=TODAY)

        assert rate is not None
        assert abs(rate - count * 365.25 / age) <= 0.5 + count * 1e-12

    @given(count=st.integers(min_value=1, max_value=10**9))
    @settings(max_examples=100)
    def test_older_is_never_higher(self, count: int) -> None:
        """Holding the count fixed, an older release never has a higher rate."""
        newer = annualize(count, "2024-01-01", "day", today=TODAY)
        older = annualize(count, "2010-01-01", "day", today=TODAY)

        assert newer is not None and older is not None
        assert older <= newer
