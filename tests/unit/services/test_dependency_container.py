"""Tests for the dependency container."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import aiohttp
import pytest

from playrate.core.resolution.orchestrator import ResolutionOrchestrator
from playrate.core.resolution.overrides import OverrideTable
from playrate.services.api.spotify_catalog import SpotifyCatalog
from playrate.services.dependency_container import DependencyContainer
from tests.factories import FakeCatalog, create_test_app_config


def _session() -> MagicMock:
    session = MagicMock(spec=aiohttp.ClientSession)
    session.closed = False
    return session


@pytest.mark.unit
class TestDependencyContainer:
    """Tests for DependencyContainer."""

    def test_services_unavailable_before_initialize(
        self, console_logger: logging.Logger, error_logger: logging.Logger
    ) -> None:
        """Accessing a service before initialize() is an error."""
        deps = DependencyContainer(create_test_app_config(), console_logger, error_logger)

        for name in ("cache", "rotator", "source_chain", "catalog", "orchestrator"):
            with pytest.raises(RuntimeError, match="not initialized"):
                getattr(deps, name)

    @pytest.mark.asyncio
    async def test_initialize_wires_services(
        self, console_logger: logging.Logger, error_logger: logging.Logger
    ) -> None:
        """initialize() builds every service from configuration."""
        session = _session()
        config = create_test_app_config(
            matching={"overrides": [{"triggers": ["BIG ONES"], "title": "Big Ones", "artist": "Aerosmith"}]}
        )
        deps = DependencyContainer(config, console_logger, error_logger, session_factory=lambda: session)

        await deps.initialize()

        assert deps.rotator.pool_size == 2
        assert deps.cache.ttl.days == 7
        assert isinstance(deps.catalog, SpotifyCatalog)
        assert isinstance(deps.orchestrator, ResolutionOrchestrator)
        assert isinstance(deps.orchestrator.parser.overrides, OverrideTable)
        assert len(deps.orchestrator.parser.overrides) == 1
        assert deps.source_chain.retry_policy.max_attempts == 3

    @pytest.mark.asyncio
    async def test_catalog_override(self, console_logger: logging.Logger, error_logger: logging.Logger) -> None:
        """A supplied catalog replaces the Spotify adapter."""
        fake = FakeCatalog()
        deps = DependencyContainer(
            create_test_app_config(), console_logger, error_logger, catalog=fake, session_factory=_session
        )

        await deps.initialize()

        assert deps.catalog is fake

    @pytest.mark.asyncio
    async def test_isolated_state_per_container(
        self, console_logger: logging.Logger, error_logger: logging.Logger
    ) -> None:
        """Each container owns its own cache and rotator."""
        first = DependencyContainer(create_test_app_config(), console_logger, error_logger, session_factory=_session)
        second = DependencyContainer(create_test_app_config(), console_logger, error_logger, session_factory=_session)

        await first.initialize()
        await second.initialize()

        assert first.cache is not second.cache
        assert first.rotator is not second.rotator

    @pytest.mark.asyncio
    async def test_close_and_shutdown(self, console_logger: logging.Logger, error_logger: logging.Logger) -> None:
        """close() closes the session; shutdown() stops the listener once."""
        session = _session()
        listener = MagicMock()
        deps = DependencyContainer(
            create_test_app_config(),
            console_logger,
            error_logger,
            logging_listener=listener,
            session_factory=lambda: session,
        )
        await deps.initialize()

        await deps.close()
        deps.shutdown()
        deps.shutdown()

        session.close.assert_awaited_once()
        listener.stop.assert_called_once()
