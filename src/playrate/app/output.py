"""Console rendering of resolution results."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from playrate.core.logger import get_shared_console
from playrate.core.models.music import ResolutionResult, ResolutionStatus, render_track_listing
from playrate.core.models.projections import result_to_dict, result_to_display
from playrate.core.resolution.formatting import format_play_count

_STATUS_STYLES = {
    ResolutionStatus.MATCHED: "green",
    ResolutionStatus.NOT_FOUND: "yellow",
    ResolutionStatus.FAILED: "red",
}


def _status_cell(result: ResolutionResult) -> str:
    color = _STATUS_STYLES[result.status]
    return f"[{color}]{result.status.value}[/{color}]"


def build_results_table(results: Sequence[ResolutionResult]) -> Table:
    """Build a table with one row per result, in input order."""
    table = Table(show_lines=True)
    table.add_column("Query", overflow="fold")
    table.add_column("Status")
    headers = list(result_to_display(results[0]).keys()) if results else []
    for header in headers:
        table.add_column(header, overflow="fold")
    table.add_column("Notes", overflow="fold")

    for result in results:
        display = result_to_display(result)
        notes = list(result.warnings)
        if result.error:
            notes.append(result.error.message)
        table.add_row(result.query, _status_cell(result), *display.values(), "; ".join(notes))
    return table


def build_playcount_table(counts: Mapping[str, int | None]) -> Table:
    """Build a URL to play count table."""
    table = Table(show_lines=True)
    table.add_column("URL", overflow="fold")
    table.add_column("Play count", justify="right")
    for url, count in counts.items():
        table.add_row(url, format_play_count(count))
    return table


def print_results(
    results: Sequence[ResolutionResult], *, as_json: bool = False, console: Console | None = None
) -> None:
    """Print results as a table, or as a JSON array."""
    _console = console or get_shared_console()
    if as_json:
        _console.print_json(json.dumps([result_to_dict(r) for r in results], ensure_ascii=False))
        return
    _console.print(build_results_table(results))
    for result in results:
        if result.entity and result.entity.tracks:
            _console.print(f"\n[bold]{result.entity.title}[/bold] tracks:")
            _console.print(render_track_listing(result.entity.tracks), markup=False)


def print_play_counts(
    counts: Mapping[str, int | None], *, as_json: bool = False, console: Console | None = None
) -> None:
    """Print URL play counts as a table, or as a JSON object."""
    _console = console or get_shared_console()
    if as_json:
        payload: dict[str, Any] = dict(counts)
        _console.print_json(json.dumps(payload, ensure_ascii=False))
        return
    _console.print(build_playcount_table(counts))
