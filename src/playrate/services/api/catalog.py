"""Catalog Provider protocol.

The resolution orchestrator depends only on this interface; the Spotify
adapter is one implementation and tests supply in-memory fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from playrate.core.models.music import Candidate, MusicEntity


@runtime_checkable
class CatalogProviderProtocol(Protocol):
    """Search and detail lookups against a music catalog.

    Implementations raise ``CatalogError`` on failure and handle their own
    token refresh; a lookup that finds nothing returns an empty list.
    """

    async def search_tracks(self, query: str, limit: int) -> list[Candidate]:
        """Search tracks.

        Args:
            query: Free search string (``"{title} {artist}"``)
            limit: Maximum number of candidates

        Returns:
            Candidates in catalog order

        """
        ...

    async def search_albums(self, query: str) -> list[Candidate]:
        """Search albums by name."""
        ...

    async def get_track(self, track_id: str) -> MusicEntity:
        """Fetch the canonical track record."""
        ...

    async def get_album(self, album_id: str) -> MusicEntity:
        """Fetch the canonical album record, including its track list."""
        ...
