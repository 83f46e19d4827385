"""Domain records for catalog resolution and play-count tracking.

All records here are immutable. External response shapes are produced from
them by the projection functions in ``core.models.projections``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

INT32_MAX = 2**31 - 1
UNKNOWN_ARTIST = "Unknown Artist"


class EntityKind(StrEnum):
    """Kind of catalog entity being resolved."""

    TRACK = "track"
    ALBUM = "album"


class ReleaseDatePrecision(StrEnum):
    """Precision of a catalog release date."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def parse(cls, value: str | None) -> ReleaseDatePrecision | None:
        """Parse a precision string, returning None when unknown."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ParseStrategy(StrEnum):
    """Rule of the intent parser that produced a hypothesis."""

    OVERRIDE = "override"
    UNKNOWN_ARTIST_MARKER = "unknown_artist_marker"
    SEPARATOR = "separator"
    WHITESPACE_SPLIT = "whitespace_split"
    VERBATIM = "verbatim"


class ResolutionStatus(StrEnum):
    """Outcome of a resolution request."""

    MATCHED = "matched"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class EntityHypothesis:
    """A low-confidence (title, artist) guess extracted from free text."""

    title: str
    artist: str | None = None
    strategy: ParseStrategy = ParseStrategy.VERBATIM

    @property
    def has_artist(self) -> bool:
        """Whether the hypothesis names a real artist (the unknown-artist marker does not count)."""
        return bool(self.artist) and self.artist.casefold() != UNKNOWN_ARTIST.casefold()

    @property
    def search_query(self) -> str:
        """Catalog search string for this hypothesis."""
        if self.has_artist:
            return f"{self.title} {self.artist}".strip()
        return self.title


@dataclass(frozen=True, slots=True)
class Candidate:
    """One search result returned by the catalog."""

    id: str
    title: str
    artists: tuple[str, ...] = ()
    popularity: int = 0

    def __post_init__(self) -> None:
        """Clamp popularity into the catalog's 0-100 range."""
        object.__setattr__(self, "popularity", max(0, min(100, int(self.popularity))))
        object.__setattr__(self, "artists", tuple(self.artists))


@dataclass(frozen=True, slots=True)
class TrackSummary:
    """A single entry of an album track list."""

    title: str
    track_number: int | None = None
    duration_ms: int | None = None


@dataclass(frozen=True, slots=True)
class TrackSummaryList:
    """Structured track list."""

    items: tuple[TrackSummary, ...]


@dataclass(frozen=True, slots=True)
class PreformattedTrackList:
    """Track list that only exists as display text."""

    text: str


TrackListRepresentation = TrackSummaryList | PreformattedTrackList


def to_track_listing(raw: Any) -> TrackListRepresentation | None:
    """Resolve a raw track list of unknown shape into the tagged variant.

    Accepts a display string, a list of strings, or a list of mappings with a
    ``name``/``title`` key. Anything else yields None.
    """
    if raw is None:
        return None
    if isinstance(raw, (TrackSummaryList, PreformattedTrackList)):
        return raw
    if isinstance(raw, str):
        return PreformattedTrackList(text=raw)
    if isinstance(raw, (list, tuple)):
        items: list[TrackSummary] = []
        for entry in raw:
            if isinstance(entry, TrackSummary):
                items.append(entry)
            elif isinstance(entry, str):
                items.append(TrackSummary(title=entry))
            elif isinstance(entry, dict):
                title = entry.get("name") or entry.get("title")
                if not title:
                    continue
                items.append(
                    TrackSummary(
                        title=str(title),
                        track_number=entry.get("track_number"),
                        duration_ms=entry.get("duration_ms"),
                    )
                )
        return TrackSummaryList(items=tuple(items))
    return None


def render_track_listing(listing: TrackListRepresentation | None) -> str:
    """Render a track list as display text."""
    match listing:
        case None:
            return ""
        case PreformattedTrackList(text=text):
            return text
        case TrackSummaryList(items=items):
            return "\n".join(
                f"{item.track_number}. {item.title}" if item.track_number is not None else item.title for item in items
            )
    return ""


@dataclass(frozen=True, slots=True)
class MusicEntity:
    """Canonical catalog record for a track or an album. Identity is ``id``."""

    id: str
    kind: EntityKind
    title: str
    artists: tuple[str, ...] = ()
    release_date: str | None = None
    release_date_precision: ReleaseDatePrecision | None = None
    popularity: int = 0
    album_title: str | None = None
    url: str | None = None
    tracks: TrackListRepresentation | None = None

    @property
    def artist_display(self) -> str:
        """Comma-joined artist names, or the unknown-artist marker."""
        return ", ".join(self.artists) if self.artists else UNKNOWN_ARTIST


@dataclass(frozen=True, slots=True)
class PlayCountRecord:
    """Cached play count for one canonical id."""

    id: str
    lifetime_count: int | None
    captured_at: datetime


@dataclass(slots=True)
class CredentialState:
    """Usage bookkeeping for one API key; mutated only under the rotator lock."""

    key: str
    usage_count: int
    last_used: datetime


@dataclass(frozen=True, slots=True)
class AnnualizedResult:
    """Lifetime play count normalized to plays per 365.25 days."""

    lifetime_count: int
    annual_rate: int
    age_in_days: int


@dataclass(frozen=True, slots=True)
class ResolutionError:
    """Why a resolution failed."""

    kind: str
    message: str
    status: int | None = None


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Result of resolving one free-text query.

    ``lifetime_count`` and ``annual_rate`` are None when no play count was
    obtained; ``age_in_days`` is None when the release date was unusable.
    """

    status: ResolutionStatus
    query: str
    hypothesis: EntityHypothesis
    kind: EntityKind = EntityKind.TRACK
    entity: MusicEntity | None = None
    lifetime_count: int | None = None
    annual_rate: int | None = None
    age_in_days: int | None = None
    error: ResolutionError | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_match(self) -> bool:
        """Whether a canonical entity was found."""
        return self.status is ResolutionStatus.MATCHED


def clamp_to_int32(value: int | None) -> int | None:
    """Clamp a play count for consumers limited to signed 32-bit integers."""
    if value is None:
        return None
    return max(-INT32_MAX - 1, min(INT32_MAX, value))
