"""Command routing for the playrate CLI.

Maps parsed arguments onto the resolution services held by the
dependency container and prints the results.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from playrate.app.output import print_play_counts, print_results
from playrate.core.logger import LogFormat, spinner
from playrate.core.models.music import EntityKind

if TYPE_CHECKING:
    from playrate.services.dependency_container import DependencyContainer


def read_queries(path: str | Path) -> list[str]:
    """Read one query per line, skipping blanks and ``#`` comments."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")]


class Orchestrator:
    """Runs one CLI command against the wired services."""

    def __init__(self, deps: DependencyContainer) -> None:
        """Initialize the orchestrator with dependencies.

        Args:
            deps: Initialized dependency container

        """
        self.deps = deps
        self.config = deps.config
        self.console_logger = deps.console_logger
        self.error_logger = deps.error_logger

    async def run_command(self, args: argparse.Namespace) -> None:
        """Execute the command named in ``args``."""
        as_json = getattr(args, "json", False)
        match getattr(args, "command", None):
            case "resolve":
                await self._run_resolve(args, as_json=as_json)
            case "batch":
                await self._run_batch(args, as_json=as_json)
            case "playcount" | "plays":
                await self._run_playcount(args, as_json=as_json)
            case other:
                msg = f"Unknown command: {other}"
                raise ValueError(msg)

    @staticmethod
    def _kind(args: argparse.Namespace) -> EntityKind:
        return EntityKind.ALBUM if getattr(args, "album", False) else EntityKind.TRACK

    async def _run_resolve(self, args: argparse.Namespace, *, as_json: bool) -> None:
        async with spinner(f"Resolving '{args.text}'..."):
            result = await self.deps.orchestrator.resolve(args.text, self._kind(args))
        print_results([result], as_json=as_json)

    async def _run_batch(self, args: argparse.Namespace, *, as_json: bool) -> None:
        queries = read_queries(args.file)
        if not queries:
            self.console_logger.warning("No queries found in %s", LogFormat.file(args.file))
            return
        concurrency = args.concurrency or self.config.resolution.concurrency
        self.console_logger.info(
            "Resolving %s queries from %s", LogFormat.number(len(queries)), LogFormat.file(args.file)
        )
        async with spinner(f"Resolving {len(queries)} queries..."):
            results = await self.deps.orchestrator.resolve_many(queries, self._kind(args), concurrency=concurrency)
        print_results(results, as_json=as_json)

    async def _run_playcount(self, args: argparse.Namespace, *, as_json: bool) -> None:
        async with spinner("Fetching play counts..."):
            counts = await self.deps.source_chain.fetch_urls(
                args.urls, concurrency=self.config.resolution.concurrency
            )
        print_play_counts(counts, as_json=as_json)
        self.console_logger.debug("Credential usage: %s", self.deps.rotator.get_stats())
