"""Resolution Orchestrator.

Free text -> hypothesis -> catalog search -> best candidate -> canonical
entity -> play count -> annual rate. Catalog failures become a ``failed``
result; play-count failures only leave the count absent.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from playrate.core.exceptions import CatalogError
from playrate.core.logger import LogFormat
from playrate.core.models.music import (
    EntityHypothesis,
    EntityKind,
    ResolutionError,
    ResolutionResult,
    ResolutionStatus,
)
from playrate.core.resolution.annualizer import annualize, annualize_record
from playrate.core.resolution.candidate_matcher import CandidateMatcher
from playrate.core.resolution.intent_parser import IntentParser

if TYPE_CHECKING:
    from playrate.services.api.catalog import CatalogProviderProtocol
    from playrate.services.api.source_chain import PlayCountSourceChain

DEFAULT_SEARCH_LIMIT = 5
DEFAULT_CONCURRENCY = 4


def _today_utc() -> date:
    return datetime.now(UTC).date()


class ResolutionOrchestrator:
    """Compose parsing, catalog lookup, matching and play-count retrieval."""

    def __init__(
        self,
        catalog: CatalogProviderProtocol,
        source_chain: PlayCountSourceChain,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        *,
        parser: IntentParser | None = None,
        matcher: CandidateMatcher | None = None,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        today: Callable[[], date] = _today_utc,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            catalog: Catalog provider used for search and detail lookups
            source_chain: Play-count lookup
            console_logger: Logger for progress
            error_logger: Logger for failures
            parser: Intent parser (default: no overrides)
            matcher: Candidate matcher (default: no overrides)
            search_limit: Track search result limit
            today: Evaluation date for annualization

        """
        self.catalog = catalog
        self.source_chain = source_chain
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.parser = parser or IntentParser(logger=console_logger)
        self.matcher = matcher or CandidateMatcher(logger=console_logger)
        self.search_limit = search_limit
        self._today = today

    async def resolve(self, text: str, kind: EntityKind = EntityKind.TRACK) -> ResolutionResult:
        """Resolve one free-text query.

        Args:
            text: Raw query
            kind: Whether to look for a track or an album

        Returns:
            ``matched``, ``not_found`` or ``failed`` result

        """
        hypothesis = self.parser.parse(text)
        self.console_logger.debug(
            "Parsed '%s' as title='%s' artist='%s' (%s)",
            text,
            hypothesis.title,
            hypothesis.artist or "-",
            hypothesis.strategy.value,
        )
        try:
            if kind is EntityKind.ALBUM:
                return await self._resolve_album(text, hypothesis)
            return await self._resolve_track(text, hypothesis)
        except CatalogError as e:
            self.error_logger.warning("Catalog lookup failed for '%s': %s", text, e)
            return ResolutionResult(
                status=ResolutionStatus.FAILED,
                query=text,
                hypothesis=hypothesis,
                kind=kind,
                error=ResolutionError(kind=type(e).__name__, message=str(e), status=e.status),
            )

    async def resolve_many(
        self,
        texts: Sequence[str],
        kind: EntityKind = EntityKind.TRACK,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> list[ResolutionResult]:
        """Resolve a batch concurrently, preserving input order."""
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def bounded(text: str) -> ResolutionResult:
            async with semaphore:
                return await self.resolve(text, kind)

        results = await asyncio.gather(*(bounded(text) for text in texts))
        matched = sum(1 for r in results if r.is_match)
        self.console_logger.info(
            "Resolved %s of %s queries", LogFormat.number(matched), LogFormat.number(len(results))
        )
        return list(results)

    async def _resolve_track(self, text: str, hypothesis: EntityHypothesis) -> ResolutionResult:
        candidates = await self.catalog.search_tracks(hypothesis.search_query, self.search_limit)
        if not candidates:
            self.console_logger.info("No track found for '%s'", text)
            return ResolutionResult(status=ResolutionStatus.NOT_FOUND, query=text, hypothesis=hypothesis)

        candidate, rule = self.matcher.select_with_rule(candidates, hypothesis)
        entity = await self.catalog.get_track(candidate.id)
        self.console_logger.info(
            "Found track %s - '%s' by '%s' (%s)", entity.id, entity.title, entity.artist_display, rule.value
        )

        warnings: list[str] = []
        lifetime_count = await self.source_chain.fetch(entity.id, entity.url)
        if lifetime_count is None:
            warnings.append("play count not available")
            return ResolutionResult(
                status=ResolutionStatus.MATCHED,
                query=text,
                hypothesis=hypothesis,
                entity=entity,
                warnings=tuple(warnings),
            )

        today = self._today()
        annualized = annualize_record(lifetime_count, entity.release_date, entity.release_date_precision, today=today)
        if annualized is None and lifetime_count > 0:
            warnings.append("release date unusable; annual rate equals lifetime count")
        return ResolutionResult(
            status=ResolutionStatus.MATCHED,
            query=text,
            hypothesis=hypothesis,
            entity=entity,
            lifetime_count=lifetime_count,
            annual_rate=(
                annualized.annual_rate
                if annualized
                else annualize(lifetime_count, entity.release_date, entity.release_date_precision, today=today)
            ),
            age_in_days=annualized.age_in_days if annualized else None,
            warnings=tuple(warnings),
        )

    async def _resolve_album(self, text: str, hypothesis: EntityHypothesis) -> ResolutionResult:
        candidates = await self.catalog.search_albums(hypothesis.title)
        if not candidates:
            self.console_logger.info("No album found for '%s'", text)
            return ResolutionResult(
                status=ResolutionStatus.NOT_FOUND, query=text, hypothesis=hypothesis, kind=EntityKind.ALBUM
            )

        candidate, rule = self.matcher.select_with_rule(candidates, hypothesis)
        entity = await self.catalog.get_album(candidate.id)
        self.console_logger.info(
            "Found album %s - '%s' by '%s' (%s)", entity.id, entity.title, entity.artist_display, rule.value
        )
        return ResolutionResult(
            status=ResolutionStatus.MATCHED,
            query=text,
            hypothesis=hypothesis,
            kind=EntityKind.ALBUM,
            entity=entity,
        )
