"""Display helpers for play counts and catalog popularity."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

NOT_AVAILABLE = "N/A"

_SCALES: tuple[tuple[int, str], ...] = (
    (1_000, "K"),
    (1_000_000, "M"),
    (1_000_000_000, "B"),
)

_POPULARITY_BANDS: tuple[tuple[int, str], ...] = (
    (20, "unpopular"),
    (40, "below average"),
    (60, "moderately popular"),
    (80, "popular"),
)


def _one_decimal(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def format_play_count(play_count: int | None) -> str:
    """Format a play count for display.

    Absent or negative counts render as ``N/A``; zero stays ``0`` so that
    "no data" and "no plays" remain distinguishable.

    Examples:
        >>> format_play_count(1500)
        '1.5K'
        >>> format_play_count(2_000_000)
        '2M'

    """
    if play_count is None or play_count < 0:
        return NOT_AVAILABLE
    if play_count < 1000:
        return str(play_count)
    # Round before choosing the unit so 999_950 becomes 1M rather than 1000K
    for index, (threshold, suffix) in enumerate(_SCALES):
        scaled = _one_decimal(Decimal(play_count) / Decimal(threshold))
        if scaled < 1000 or index == len(_SCALES) - 1:
            return f"{scaled:f}".removesuffix(".0") + suffix
    return str(play_count)


def categorize_popularity(popularity: int) -> str:
    """Map a 0-100 catalog popularity score onto a coarse label."""
    for upper_bound, label in _POPULARITY_BANDS:
        if popularity <= upper_bound:
            return label
    return "very popular"
