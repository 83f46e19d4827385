"""Annualizer: normalize a lifetime play count to plays per 365.25 days.

Pure functions only. The reference date is derived from the catalog release
date and its precision; a release date that cannot be interpreted leaves the
count untouched rather than extrapolating.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal

from playrate.core.models.music import AnnualizedResult, ReleaseDatePrecision

DAYS_PER_YEAR = Decimal("365.25")

_DAY_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})(?:-\d{1,2})?$")
_YEAR_PATTERN = re.compile(r"^(\d{4})(?:-\d{1,2}(?:-\d{1,2})?)?$")


def infer_precision(release_date: str | None) -> ReleaseDatePrecision | None:
    """Infer precision from the shape of a catalog date (``YYYY[-MM[-DD]]``)."""
    if not release_date:
        return None
    value = release_date.strip()
    if _DAY_PATTERN.match(value):
        return ReleaseDatePrecision.DAY
    if _MONTH_PATTERN.match(value):
        return ReleaseDatePrecision.MONTH
    if _YEAR_PATTERN.match(value):
        return ReleaseDatePrecision.YEAR
    return None


def resolve_reference_date(
    release_date: str | None, precision: ReleaseDatePrecision | str | None
) -> date | None:
    """Resolve a concrete reference date.

    ``day`` parses the full date, ``month`` uses the first of the month and
    ``year`` uses January 1. A coarser precision accepts a longer date string
    and ignores the extra components. Missing precision is inferred from the
    shape of the date.

    Args:
        release_date: Catalog release date string
        precision: Catalog release date precision

    Returns:
        Reference date, or None when the date cannot be interpreted

    """
    if not release_date:
        return None
    value = release_date.strip()
    resolved = ReleaseDatePrecision.parse(precision) if isinstance(precision, str) else precision
    if resolved is None:
        resolved = infer_precision(value)
    if resolved is None:
        return None

    try:
        if resolved is ReleaseDatePrecision.DAY:
            if match := _DAY_PATTERN.match(value):
                return date(int(match[1]), int(match[2]), int(match[3]))
        elif resolved is ReleaseDatePrecision.MONTH:
            if match := _MONTH_PATTERN.match(value):
                return date(int(match[1]), int(match[2]), 1)
        elif match := _YEAR_PATTERN.match(value):
            return date(int(match[1]), 1, 1)
    except ValueError:
        return None
    return None


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _today_utc() -> date:
    return datetime.now(UTC).date()


def annualize_record(
    lifetime_count: int | None,
    release_date: str | None,
    precision: ReleaseDatePrecision | str | None,
    *,
    today: date | None = None,
) -> AnnualizedResult | None:
    """Compute the full annualized result.

    Returns None when the count is absent, non-positive, or the release date
    cannot be interpreted; in the latter two cases ``annualize`` hands back
    the lifetime count unchanged.
    """
    if lifetime_count is None or lifetime_count <= 0:
        return None
    reference = resolve_reference_date(release_date, precision)
    if reference is None:
        return None

    current = today or _today_utc()
    age_in_days = max(1, (current - reference).days)
    annual_rate = _round_half_up(Decimal(lifetime_count) / Decimal(age_in_days) * DAYS_PER_YEAR)
    return AnnualizedResult(lifetime_count=lifetime_count, annual_rate=annual_rate, age_in_days=age_in_days)


def annualize(
    lifetime_count: int | None,
    release_date: str | None,
    precision: ReleaseDatePrecision | str | None,
    *,
    today: date | None = None,
) -> int | None:
    """Normalize a lifetime count to an annual rate.

    Args:
        lifetime_count: Cumulative plays, or None when unknown
        release_date: Catalog release date (``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``)
        precision: Release date precision; inferred from the date when None
        today: Evaluation date, defaults to the current UTC date

    Returns:
        Plays per 365.25 days; None for an absent count; the count itself
        when it is not positive or the date is unusable

    Examples:
        >>> annualize(100, "2024-03-01", "day", today=date(2024, 3, 1))
        36525

    """
    if lifetime_count is None:
        return None
    result = annualize_record(lifetime_count, release_date, precision, today=today)
    return result.annual_rate if result else lifetime_count
