"""Pytest configuration and shared fixtures for playrate.

This module configures the test environment by ensuring the project root
and ``src`` are on sys.path, allowing imports of ``playrate`` and of the
``tests`` helpers without installation.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

import aiohttp
import pytest

# Ensure project root and src are on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
for path in (PROJECT_ROOT, PROJECT_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from tests.factories import FakeClock  # noqa: E402


@pytest.fixture
def mock_console_logger() -> MagicMock:
    """Mock console logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def mock_error_logger() -> MagicMock:
    """Mock error logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def console_logger() -> logging.Logger:
    """Real console logger for tests."""
    return logging.getLogger("test.console")


@pytest.fixture
def error_logger() -> logging.Logger:
    """Real error logger for tests."""
    return logging.getLogger("test.error")


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced clock starting at 2025-01-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def mock_session() -> MagicMock:
    """Mocked aiohttp session that is open."""
    session = MagicMock(spec=aiohttp.ClientSession)
    session.closed = False
    return session
