"""Alias/override table for queries the general heuristics mis-split.

Rules come from the ``matching.overrides`` configuration section. Each rule
names the literal fragments (``triggers``) that identify a query and the
canonical (title, artist) pair it stands for.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playrate.core.models.music import Candidate, EntityHypothesis
    from playrate.core.models.settings import MatchingConfig


@dataclass(frozen=True, slots=True)
class OverrideRule:
    """One alias entry: all triggers present means (title, artist)."""

    triggers: tuple[str, ...]
    title: str
    artist: str

    def matches_text(self, text: str) -> bool:
        """Whether every trigger occurs in ``text`` (case-insensitive)."""
        folded = text.casefold()
        return bool(self.triggers) and all(trigger.casefold() in folded for trigger in self.triggers)

    def matches_hypothesis(self, hypothesis: EntityHypothesis) -> bool:
        """Whether a parsed hypothesis names this rule's title and artist."""
        if not hypothesis.artist:
            return False
        return (
            self.title.casefold() in hypothesis.title.casefold()
            and self.artist.casefold() in hypothesis.artist.casefold()
        )

    def matches_candidate(self, candidate: Candidate) -> bool:
        """Whether a search candidate is the entity this rule points at."""
        if self.title.casefold() not in candidate.title.casefold():
            return False
        artist = self.artist.casefold()
        return any(artist in name.casefold() for name in candidate.artists)


class OverrideTable:
    """Ordered collection of override rules; the first matching rule wins."""

    def __init__(self, rules: Iterable[OverrideRule] = ()) -> None:
        """Initialize the table.

        Args:
            rules: Rules in priority order

        """
        self._rules: tuple[OverrideRule, ...] = tuple(rules)

    @classmethod
    def from_config(cls, matching: MatchingConfig) -> OverrideTable:
        """Build a table from the validated ``matching`` config section."""
        return cls(
            OverrideRule(
                triggers=tuple(trigger.strip() for trigger in entry.triggers if trigger.strip()),
                title=entry.title,
                artist=entry.artist,
            )
            for entry in matching.overrides
        )

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[OverrideRule, ...]:
        """Rules in priority order."""
        return self._rules

    def match_text(self, text: str) -> OverrideRule | None:
        """Return the first rule whose triggers all occur in raw query text."""
        return next((rule for rule in self._rules if rule.matches_text(text)), None)

    def match_hypothesis(self, hypothesis: EntityHypothesis) -> OverrideRule | None:
        """Return the first rule that applies to a parsed hypothesis."""
        return next((rule for rule in self._rules if rule.matches_hypothesis(hypothesis)), None)

    def find_candidate(self, candidates: Sequence[Candidate], hypothesis: EntityHypothesis) -> Candidate | None:
        """Return the first candidate an applicable rule points at, if any."""
        rule = self.match_hypothesis(hypothesis)
        if rule is None:
            return None
        return next((candidate for candidate in candidates if rule.matches_candidate(candidate)), None)
