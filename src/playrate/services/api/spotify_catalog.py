"""Spotify Web API catalog adapter (client-credentials flow).

Implements ``CatalogProviderProtocol`` on top of aiohttp. Access tokens are
refreshed ahead of expiry; a 401 triggers one serialized refresh and one
retry. Every other failure surfaces as ``CatalogError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp

from playrate.core.exceptions import CatalogAuthError, CatalogError
from playrate.core.logger import LogFormat
from playrate.core.models.music import (
    Candidate,
    EntityKind,
    MusicEntity,
    ReleaseDatePrecision,
    to_track_listing,
)
from playrate.core.models.settings import CatalogConfig

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
TOKEN_REFRESH_MARGIN_SECONDS = 300
DEFAULT_TOKEN_TTL_SECONDS = 3600


def _artist_names(item: dict[str, Any]) -> tuple[str, ...]:
    return tuple(a["name"] for a in item.get("artists") or () if isinstance(a, dict) and a.get("name"))


def _require_id(payload: dict[str, Any], kind: str) -> None:
    if not payload.get("id"):
        msg = f"Spotify {kind} response has no id"
        raise CatalogError(msg)


def candidate_from_item(item: dict[str, Any]) -> Candidate:
    """Build a search candidate from a Spotify track or album object."""
    return Candidate(
        id=str(item.get("id") or ""),
        title=str(item.get("name") or ""),
        artists=_artist_names(item),
        popularity=int(item.get("popularity") or 0),
    )


def track_from_payload(payload: dict[str, Any]) -> MusicEntity:
    """Build a canonical track from a Spotify ``/tracks/{id}`` response."""
    _require_id(payload, "track")
    album = payload.get("album") or {}
    return MusicEntity(
        id=str(payload["id"]),
        kind=EntityKind.TRACK,
        title=str(payload.get("name") or ""),
        artists=_artist_names(payload),
        release_date=album.get("release_date") or None,
        release_date_precision=ReleaseDatePrecision.parse(album.get("release_date_precision")),
        popularity=int(payload.get("popularity") or 0),
        album_title=album.get("name"),
        url=(payload.get("external_urls") or {}).get("spotify"),
    )


def album_from_payload(payload: dict[str, Any]) -> MusicEntity:
    """Build a canonical album from a Spotify ``/albums/{id}`` response."""
    _require_id(payload, "album")
    tracks = (payload.get("tracks") or {}).get("items")
    return MusicEntity(
        id=str(payload["id"]),
        kind=EntityKind.ALBUM,
        title=str(payload.get("name") or ""),
        artists=_artist_names(payload),
        release_date=payload.get("release_date") or None,
        release_date_precision=ReleaseDatePrecision.parse(payload.get("release_date_precision")),
        popularity=int(payload.get("popularity") or 0),
        url=(payload.get("external_urls") or {}).get("spotify"),
        tracks=to_track_listing(tracks),
    )


class SpotifyCatalog:
    """Catalog provider backed by the Spotify Web API."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None,
        config: CatalogConfig,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
    ) -> None:
        """Initialize the adapter.

        Args:
            session: Shared aiohttp session owned by the container
            config: Catalog configuration section
            console_logger: Logger for progress
            error_logger: Logger for failures

        """
        self.session = session
        self.config = config
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.timeout = aiohttp.ClientTimeout(total=config.request_timeout_seconds)
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            msg = "HTTP session not initialized or closed"
            raise CatalogError(msg)
        return self.session

    def _token_valid(self) -> bool:
        return self._access_token is not None and time.monotonic() < self._token_expires_at

    async def refresh_token(self, rejected_token: str | None = None) -> str:
        """Return a valid client-credentials access token, requesting one if needed.

        Concurrent callers share one refresh: whoever gets the lock second sees
        the fresh token and returns it without another request.

        Args:
            rejected_token: Token the API just refused; never handed out again

        """
        async with self._token_lock:
            current = self._access_token
            if current is not None and self._token_valid() and current != rejected_token:
                return current

            if not self.config.client_id or not self.config.client_secret:
                msg = "Spotify client_id/client_secret are not configured"
                raise CatalogAuthError(msg)

            session = self._require_session()
            self.console_logger.debug("Refreshing %s access token", LogFormat.entity("Spotify"))
            try:
                async with session.post(
                    self.config.token_url,
                    data={"grant_type": "client_credentials"},
                    auth=aiohttp.BasicAuth(self.config.client_id, self.config.client_secret),
                    timeout=self.timeout,
                ) as response:
                    if response.status != HTTP_OK:
                        body = await response.text()
                        msg = f"Token request failed with status {response.status}: {body[:200]}"
                        raise CatalogAuthError(msg, status=response.status)
                    payload = await response.json(content_type=None)
            except (TimeoutError, aiohttp.ClientError) as e:
                msg = f"Token request failed: {e}"
                raise CatalogAuthError(msg) from e

            token = payload.get("access_token") if isinstance(payload, dict) else None
            if not token:
                msg = "Token response did not contain an access_token"
                raise CatalogAuthError(msg)
            expires_in = int(payload.get("expires_in") or DEFAULT_TOKEN_TTL_SECONDS)
            self._access_token = str(token)
            self._token_expires_at = time.monotonic() + max(0, expires_in - TOKEN_REFRESH_MARGIN_SECONDS)
            return self._access_token

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET an API path, refreshing the token once on 401."""
        url = f"{self.config.api_base_url.rstrip('/')}/{path.lstrip('/')}"
        token = await self.refresh_token()
        status, payload = await self._request(url, params, token)
        if status == HTTP_UNAUTHORIZED:
            self.error_logger.warning("Spotify token rejected; refreshing and retrying once")
            token = await self.refresh_token(rejected_token=token)
            status, payload = await self._request(url, params, token)
            if status == HTTP_UNAUTHORIZED:
                msg = f"Spotify rejected a freshly issued token for {path}"
                raise CatalogAuthError(msg, status=status)
        if status != HTTP_OK:
            msg = f"Spotify request {path} failed with status {status}"
            raise CatalogError(msg, status=status)
        if not isinstance(payload, dict):
            msg = f"Spotify returned an unexpected body for {path}"
            raise CatalogError(msg, status=status)
        return payload

    async def _request(self, url: str, params: dict[str, Any] | None, token: str) -> tuple[int, Any]:
        session = self._require_session()
        try:
            async with session.get(
                url,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            ) as response:
                if response.status != HTTP_OK:
                    return response.status, None
                return response.status, await response.json(content_type=None)
        except (TimeoutError, aiohttp.ClientError) as e:
            msg = f"Spotify request to {url} failed: {e}"
            raise CatalogError(msg) from e
        except ValueError as e:
            msg = f"Spotify returned invalid JSON for {url}"
            raise CatalogError(msg) from e

    async def search_tracks(self, query: str, limit: int) -> list[Candidate]:
        """Search tracks, highest popularity first."""
        payload = await self._get_json(
            "search", {"q": query, "type": "track", "limit": limit, "market": self.config.market}
        )
        items = (payload.get("tracks") or {}).get("items") or []
        candidates = [candidate_from_item(item) for item in items if isinstance(item, dict) and item.get("id")]
        candidates.sort(key=lambda c: c.popularity, reverse=True)
        self.console_logger.debug("Found %s tracks for '%s'", LogFormat.number(len(candidates)), query)
        return candidates[:limit]

    async def search_albums(self, query: str) -> list[Candidate]:
        """Search albums by name, in catalog order."""
        payload = await self._get_json(
            "search",
            {"q": query, "type": "album", "limit": self.config.search_limit, "market": self.config.market},
        )
        items = (payload.get("albums") or {}).get("items") or []
        return [candidate_from_item(item) for item in items if isinstance(item, dict) and item.get("id")]

    async def get_track(self, track_id: str) -> MusicEntity:
        """Fetch the canonical track record."""
        return track_from_payload(await self._get_json(f"tracks/{track_id}", {"market": self.config.market}))

    async def get_album(self, album_id: str) -> MusicEntity:
        """Fetch the canonical album record with its track list."""
        return album_from_payload(await self._get_json(f"albums/{album_id}", {"market": self.config.market}))
