"""Tests for CLI command routing."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import allure
import pytest

from playrate.app.orchestrator import Orchestrator, read_queries
from playrate.core.models.music import EntityKind
from tests.factories import create_test_app_config


def _deps() -> MagicMock:
    deps = MagicMock()
    deps.config = create_test_app_config()
    deps.orchestrator.resolve = AsyncMock(return_value="result")
    deps.orchestrator.resolve_many = AsyncMock(return_value=["r1", "r2"])
    deps.source_chain.fetch_urls = AsyncMock(return_value={"u": 1})
    return deps


def _args(command: str, **kwargs: Any) -> argparse.Namespace:
    return argparse.Namespace(command=command, json=False, **kwargs)


@pytest.mark.unit
@allure.epic("playrate")
@allure.feature("Orchestration")
class TestOrchestratorRouting:
    """Tests for Orchestrator.run_command."""

    @pytest.mark.asyncio
    async def test_resolve(self) -> None:
        """resolve calls the resolution orchestrator once."""
        deps = _deps()
        with patch("playrate.app.orchestrator.print_results") as printer:
            await Orchestrator(deps).run_command(_args("resolve", text="Thriller", album=True))

        deps.orchestrator.resolve.assert_awaited_once_with("Thriller", EntityKind.ALBUM)
        printer.assert_called_once_with(["result"], as_json=False)

    @pytest.mark.asyncio
    async def test_batch_uses_config_concurrency(self, tmp_path: Path) -> None:
        """batch reads the file and falls back to configured concurrency."""
        queries = tmp_path / "queries.txt"
        queries.write_text("# comment\nFantasy by Mariah Carey\n\n  Thriller  \n", encoding="utf-8")
        deps = _deps()

        with patch("playrate.app.orchestrator.print_results"):
            await Orchestrator(deps).run_command(_args("batch", file=str(queries), album=False, concurrency=None))

        deps.orchestrator.resolve_many.assert_awaited_once_with(
            ["Fantasy by Mariah Carey", "Thriller"], EntityKind.TRACK, concurrency=4
        )

    @pytest.mark.asyncio
    async def test_batch_empty_file(self, tmp_path: Path) -> None:
        """An empty query file resolves nothing."""
        queries = tmp_path / "empty.txt"
        queries.write_text("\n# only comments\n", encoding="utf-8")
        deps = _deps()

        await Orchestrator(deps).run_command(_args("batch", file=str(queries), album=False, concurrency=2))

        deps.orchestrator.resolve_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_playcount(self) -> None:
        """playcount fetches the given URLs."""
        deps = _deps()
        with patch("playrate.app.orchestrator.print_play_counts") as printer:
            await Orchestrator(deps).run_command(_args("plays", urls=["u"]))

        deps.source_chain.fetch_urls.assert_awaited_once_with(["u"], concurrency=4)
        printer.assert_called_once_with({"u": 1}, as_json=False)

    @pytest.mark.asyncio
    async def test_unknown_command(self) -> None:
        """An unknown command is a ValueError."""
        with pytest.raises(ValueError, match="Unknown command"):
            await Orchestrator(_deps()).run_command(_args("dance"))


@pytest.mark.unit
def test_read_queries_skips_blanks_and_comments(tmp_path: Path) -> None:
    """Blank lines and # comments are ignored; lines are trimmed."""
    path = tmp_path / "q.txt"
    path.write_text("a\n  \n#x\n  b by c \n", encoding="utf-8")

    assert read_queries(path) == ["a", "b by c"]
