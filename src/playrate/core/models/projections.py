"""Projections from the canonical records onto external response shapes.

Each function is pure: it reads a ``ResolutionResult`` (or ``MusicEntity``)
and returns a plain dict for one consumer contract.
"""

from __future__ import annotations

from typing import Any

from playrate.core.models.music import (
    MusicEntity,
    ResolutionResult,
    clamp_to_int32,
    render_track_listing,
)
from playrate.core.resolution.formatting import categorize_popularity, format_play_count


def entity_to_dict(entity: MusicEntity) -> dict[str, Any]:
    """Full canonical view of an entity."""
    return {
        "id": entity.id,
        "kind": entity.kind.value,
        "title": entity.title,
        "artists": list(entity.artists),
        "release_date": entity.release_date,
        "release_date_precision": entity.release_date_precision.value if entity.release_date_precision else None,
        "popularity": entity.popularity,
        "album_title": entity.album_title,
        "url": entity.url,
        "tracks": render_track_listing(entity.tracks) or None,
    }


def result_to_dict(result: ResolutionResult) -> dict[str, Any]:
    """JSON view of a resolution result; absent counts stay ``None``."""
    return {
        "status": result.status.value,
        "query": result.query,
        "kind": result.kind.value,
        "hypothesis": {
            "title": result.hypothesis.title,
            "artist": result.hypothesis.artist,
            "strategy": result.hypothesis.strategy.value,
        },
        "entity": entity_to_dict(result.entity) if result.entity else None,
        "play_count": result.lifetime_count,
        "annual_play_count": result.annual_rate,
        "age_in_days": result.age_in_days,
        "error": (
            {"kind": result.error.kind, "message": result.error.message, "status": result.error.status}
            if result.error
            else None
        ),
        "warnings": list(result.warnings),
    }


def result_to_display(result: ResolutionResult) -> dict[str, str]:
    """Human-readable view: formatted counts with an explicit N/A marker."""
    entity = result.entity
    return {
        "Title": entity.title if entity else result.hypothesis.title,
        "Artist": entity.artist_display if entity else (result.hypothesis.artist or "-"),
        "Album": (entity.album_title or "-") if entity else "-",
        "Released": (entity.release_date or "-") if entity else "-",
        "Popularity": (f"{entity.popularity} ({categorize_popularity(entity.popularity)})" if entity else "-"),
        "Play count": format_play_count(result.lifetime_count),
        "Annual plays": format_play_count(result.annual_rate),
    }


def result_to_legacy_dict(result: ResolutionResult) -> dict[str, Any]:
    """Flat track response for consumers that store counts as 32-bit integers."""
    entity = result.entity
    return {
        "Id": entity.id if entity else None,
        "Name": entity.title if entity else result.hypothesis.title,
        "ArtistName": entity.artist_display if entity else result.hypothesis.artist,
        "Popularity": entity.popularity if entity else None,
        "PopularityRating": categorize_popularity(entity.popularity) if entity else None,
        "ReleaseDate": entity.release_date if entity else None,
        "PlayCount": clamp_to_int32(result.lifetime_count),
        "AnnualPlayCount": clamp_to_int32(result.annual_rate),
    }
