"""Dependency Injection Container Module.

Builds every service from the validated configuration, owns the shared
aiohttp session, and shuts everything down in order. Cache and rotator live
here (one instance per container) rather than in module-level state, so tests
can build isolated containers.
"""

from __future__ import annotations

import ssl
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING

import aiohttp
import certifi

from playrate.core.logger import LogFormat
from playrate.core.resolution.candidate_matcher import CandidateMatcher
from playrate.core.resolution.intent_parser import IntentParser
from playrate.core.resolution.orchestrator import ResolutionOrchestrator
from playrate.core.resolution.overrides import OverrideTable
from playrate.core.retry_handler import RetryPolicy

from .api.playcount_client import PlayCountClient
from .api.source_chain import PlayCountAnomalyMonitor, PlayCountSourceChain
from .api.spotify_catalog import SpotifyCatalog
from .cache.playcount_cache import PlayCountCache
from .credentials.rotator import CredentialRotator

if TYPE_CHECKING:
    import logging

    from playrate.core.logger import SafeQueueListener
    from playrate.core.models.settings import AppConfig
    from playrate.services.api.catalog import CatalogProviderProtocol

USER_AGENT = "playrate/1.0"


def create_client_session() -> aiohttp.ClientSession:
    """Create an aiohttp ClientSession with certifi-based TLS verification."""
    timeout = aiohttp.ClientTimeout(total=45, connect=15, sock_connect=15, sock_read=30)
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(limit_per_host=10, limit=50, ttl_dns_cache=300, ssl=ssl_context)
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    return aiohttp.ClientSession(timeout=timeout, connector=connector, headers=headers)


class DependencyContainer:
    """Dependency injection container for the application."""

    def __init__(
        self,
        config: AppConfig,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        *,
        logging_listener: SafeQueueListener | None = None,
        catalog: CatalogProviderProtocol | None = None,
        session_factory: Callable[[], aiohttp.ClientSession] = create_client_session,
    ) -> None:
        """Initialize the dependency container.

        Args:
            config: Validated application configuration
            console_logger: Logger for console output
            error_logger: Logger for error messages
            logging_listener: Optional queue listener for logging
            catalog: Catalog provider override (defaults to the Spotify adapter)
            session_factory: Builds the shared HTTP session

        """
        self._config = config
        self._console_logger = console_logger
        self._error_logger = error_logger
        self._listener = logging_listener
        self._session_factory = session_factory
        self._catalog_override = catalog

        self._session: aiohttp.ClientSession | None = None
        self._cache: PlayCountCache | None = None
        self._rotator: CredentialRotator | None = None
        self._playcount_client: PlayCountClient | None = None
        self._source_chain: PlayCountSourceChain | None = None
        self._catalog: CatalogProviderProtocol | None = None
        self._orchestrator: ResolutionOrchestrator | None = None

    @property
    def config(self) -> AppConfig:
        """Get the application configuration."""
        return self._config

    @property
    def console_logger(self) -> logging.Logger:
        """Get the console logger."""
        return self._console_logger

    @property
    def error_logger(self) -> logging.Logger:
        """Get the error logger."""
        return self._error_logger

    @property
    def cache(self) -> PlayCountCache:
        """Get the play-count cache."""
        if self._cache is None:
            msg = "Play count cache not initialized"
            raise RuntimeError(msg)
        return self._cache

    @property
    def rotator(self) -> CredentialRotator:
        """Get the credential rotator."""
        if self._rotator is None:
            msg = "Credential rotator not initialized"
            raise RuntimeError(msg)
        return self._rotator

    @property
    def source_chain(self) -> PlayCountSourceChain:
        """Get the play-count source chain."""
        if self._source_chain is None:
            msg = "Play count source chain not initialized"
            raise RuntimeError(msg)
        return self._source_chain

    @property
    def catalog(self) -> CatalogProviderProtocol:
        """Get the catalog provider."""
        if self._catalog is None:
            msg = "Catalog provider not initialized"
            raise RuntimeError(msg)
        return self._catalog

    @property
    def orchestrator(self) -> ResolutionOrchestrator:
        """Get the resolution orchestrator."""
        if self._orchestrator is None:
            msg = "Resolution orchestrator not initialized"
            raise RuntimeError(msg)
        return self._orchestrator

    async def initialize(self) -> None:
        """Create the HTTP session and wire all services."""
        self._console_logger.debug("Initializing %s...", LogFormat.entity("DependencyContainer"))
        playcount = self._config.playcount

        if self._session is None or self._session.closed:
            self._session = self._session_factory()

        if self._cache is None:
            self._cache = PlayCountCache(self._console_logger, ttl=timedelta(days=playcount.cache_ttl_days))
        if self._rotator is None:
            self._rotator = CredentialRotator(
                playcount.api_keys,
                self._console_logger,
                self._error_logger,
                daily_limit=playcount.daily_limit,
                reset_window=timedelta(hours=playcount.reset_window_hours),
            )
        if self._playcount_client is None:
            self._playcount_client = PlayCountClient(
                self._session,
                self._console_logger,
                self._error_logger,
                base_url=playcount.base_url,
                api_key_header=playcount.api_key_header,
                timeout_seconds=playcount.request_timeout_seconds,
            )
        if self._source_chain is None:
            self._source_chain = PlayCountSourceChain(
                self._playcount_client,
                self._rotator,
                self._cache,
                self._console_logger,
                self._error_logger,
                retry_policy=RetryPolicy(
                    max_attempts=playcount.retry_attempts,
                    base_delay_seconds=playcount.backoff_base_seconds,
                ),
                catalog_url_template=playcount.catalog_url_template,
                anomaly_monitor=PlayCountAnomalyMonitor(self._error_logger),
            )
        if self._catalog is None:
            self._catalog = self._catalog_override or SpotifyCatalog(
                self._session, self._config.catalog, self._console_logger, self._error_logger
            )
        if self._orchestrator is None:
            overrides = OverrideTable.from_config(self._config.matching)
            self._orchestrator = ResolutionOrchestrator(
                self._catalog,
                self._source_chain,
                self._console_logger,
                self._error_logger,
                parser=IntentParser(overrides, self._console_logger),
                matcher=CandidateMatcher(overrides, self._console_logger),
                search_limit=self._config.catalog.search_limit,
            )

        self._console_logger.debug(
            "%s ready: %s API keys, %s overrides",
            LogFormat.entity("DependencyContainer"),
            LogFormat.number(self._rotator.pool_size),
            LogFormat.number(len(self._config.matching.overrides)),
        )

    async def close(self) -> None:
        """Close the shared HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._console_logger.debug("HTTP session closed")
        self._session = None

    def shutdown(self) -> None:
        """Stop the logging listener."""
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
