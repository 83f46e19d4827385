"""Candidate Matcher.

Picks one candidate out of a catalog search result list using tiered rules.
Artist evidence outranks title evidence; within a rule the catalog's own
ordering breaks ties.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import StrEnum

from playrate.core.models.music import Candidate, EntityHypothesis
from playrate.core.resolution.overrides import OverrideTable


class MatchRule(StrEnum):
    """Rule that selected a candidate, in priority order."""

    OVERRIDE = "override"
    EXACT_ARTIST = "exact_artist"
    PARTIAL_ARTIST = "partial_artist"
    EXACT_TITLE = "exact_title"
    PARTIAL_TITLE = "partial_title"
    FIRST_CANDIDATE = "first_candidate"


def _equals_ignore_case(left: str, right: str) -> bool:
    return left.casefold() == right.casefold()


def _contains_either_way(left: str, right: str) -> bool:
    """Bidirectional case-insensitive containment; empty strings never match."""
    if not left or not right:
        return False
    a, b = left.casefold(), right.casefold()
    return a in b or b in a


def _first(candidates: Sequence[Candidate], predicate: Callable[[Candidate], bool]) -> Candidate | None:
    return next((candidate for candidate in candidates if predicate(candidate)), None)


class CandidateMatcher:
    """Select the best catalog candidate for a hypothesis."""

    def __init__(self, overrides: OverrideTable | None = None, logger: logging.Logger | None = None) -> None:
        """Initialize the matcher.

        Args:
            overrides: Alias table checked before the general rules
            logger: Logger for match diagnostics

        """
        self.overrides = overrides or OverrideTable()
        self.logger = logger or logging.getLogger(__name__)

    def select(self, candidates: Sequence[Candidate], hypothesis: EntityHypothesis) -> Candidate:
        """Return the best candidate; see ``select_with_rule``."""
        candidate, _ = self.select_with_rule(candidates, hypothesis)
        return candidate

    def select_with_rule(
        self, candidates: Sequence[Candidate], hypothesis: EntityHypothesis
    ) -> tuple[Candidate, MatchRule]:
        """Return the best candidate together with the rule that chose it.

        Args:
            candidates: Non-empty search results in catalog order
            hypothesis: Parsed (title, artist) guess

        Returns:
            Tuple of (selected candidate, matching rule)

        Raises:
            ValueError: If ``candidates`` is empty

        """
        if not candidates:
            msg = "select() requires at least one candidate"
            raise ValueError(msg)

        if override := self.overrides.find_candidate(candidates, hypothesis):
            return self._chosen(override, MatchRule.OVERRIDE)

        artist = hypothesis.artist
        if artist and hypothesis.has_artist:
            if exact := _first(candidates, lambda c: any(_equals_ignore_case(name, artist) for name in c.artists)):
                return self._chosen(exact, MatchRule.EXACT_ARTIST)
            if partial := _first(candidates, lambda c: any(_contains_either_way(name, artist) for name in c.artists)):
                return self._chosen(partial, MatchRule.PARTIAL_ARTIST)

        title = hypothesis.title
        if title:
            if exact := _first(candidates, lambda c: _equals_ignore_case(c.title, title)):
                return self._chosen(exact, MatchRule.EXACT_TITLE)
            if partial := _first(candidates, lambda c: _contains_either_way(c.title, title)):
                return self._chosen(partial, MatchRule.PARTIAL_TITLE)

        return self._chosen(candidates[0], MatchRule.FIRST_CANDIDATE)

    def _chosen(self, candidate: Candidate, rule: MatchRule) -> tuple[Candidate, MatchRule]:
        self.logger.debug(
            "Selected '%s' by '%s' (%s)", candidate.title, ", ".join(candidate.artists) or "-", rule.value
        )
        return candidate, rule
