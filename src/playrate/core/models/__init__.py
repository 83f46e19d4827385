"""Domain records and configuration models."""

from .music import (
    UNKNOWN_ARTIST,
    AnnualizedResult,
    Candidate,
    CredentialState,
    EntityHypothesis,
    EntityKind,
    MusicEntity,
    ParseStrategy,
    PlayCountRecord,
    PreformattedTrackList,
    ReleaseDatePrecision,
    ResolutionError,
    ResolutionResult,
    ResolutionStatus,
    TrackListRepresentation,
    TrackSummary,
    TrackSummaryList,
    clamp_to_int32,
    render_track_listing,
    to_track_listing,
)
from .settings import AppConfig

__all__ = [
    "UNKNOWN_ARTIST",
    "AnnualizedResult",
    "AppConfig",
    "Candidate",
    "CredentialState",
    "EntityHypothesis",
    "EntityKind",
    "MusicEntity",
    "ParseStrategy",
    "PlayCountRecord",
    "PreformattedTrackList",
    "ReleaseDatePrecision",
    "ResolutionError",
    "ResolutionResult",
    "ResolutionStatus",
    "TrackListRepresentation",
    "TrackSummary",
    "TrackSummaryList",
    "clamp_to_int32",
    "render_track_listing",
    "to_track_listing",
]
