"""Intent Parser.

Turns loosely structured free text such as ``"'Get A Grip' by Aerosmith"``
into an ``EntityHypothesis``. Parsing never fails: the worst case is the whole
text as the title with no artist.
"""

from __future__ import annotations

import logging
import re

from playrate.core.models.music import UNKNOWN_ARTIST, EntityHypothesis, ParseStrategy
from playrate.core.resolution.overrides import OverrideTable

SEPARATOR = " by "
UNKNOWN_ARTIST_MARKER = f"by {UNKNOWN_ARTIST}"
_QUOTE_CHARS = ("'", '"')
_SEPARATOR_PATTERN = re.compile(re.escape(SEPARATOR), re.IGNORECASE)
_MARKER_PATTERN = re.compile(re.escape(UNKNOWN_ARTIST_MARKER) + r"$", re.IGNORECASE)


def strip_outer_quotes(text: str) -> str:
    """Strip one layer of matching single or double quotes, then trim."""
    text = text.strip()
    if len(text) >= 2 and text[0] in _QUOTE_CHARS and text[0] == text[-1]:
        return text[1:-1].strip()
    return text


def _split_on_separator(text: str) -> tuple[str, str] | None:
    """Split at the first case-insensitive `` by `` with a non-empty left side."""
    match = _SEPARATOR_PATTERN.search(text)
    if match is None or match.start() == 0:
        return None
    title = strip_outer_quotes(text[: match.start()])
    artist = text[match.end() :].strip()
    return title, artist


class IntentParser:
    """Extract a (title, artist) hypothesis from free text."""

    def __init__(self, overrides: OverrideTable | None = None, logger: logging.Logger | None = None) -> None:
        """Initialize the parser.

        Args:
            overrides: Alias table consulted before the general heuristics
            logger: Logger for parse diagnostics

        """
        self.overrides = overrides or OverrideTable()
        self.logger = logger or logging.getLogger(__name__)

    def parse(self, text: str | None) -> EntityHypothesis:
        """Parse free text into a hypothesis.

        Args:
            text: Raw query, possibly empty

        Returns:
            Hypothesis tagged with the rule that produced it

        """
        raw = text or ""

        if rule := self.overrides.match_text(raw):
            self.logger.debug("Override matched for '%s': '%s' by '%s'", raw, rule.title, rule.artist)
            return EntityHypothesis(title=rule.title, artist=rule.artist, strategy=ParseStrategy.OVERRIDE)

        cleaned = strip_outer_quotes(raw)

        if marker := _MARKER_PATTERN.search(cleaned):
            remainder = cleaned[: marker.start()].strip()
            if split := _split_on_separator(remainder):
                title, artist = split
                return EntityHypothesis(title=title, artist=artist or None, strategy=ParseStrategy.SEPARATOR)
            return EntityHypothesis(
                title=strip_outer_quotes(remainder),
                artist=UNKNOWN_ARTIST,
                strategy=ParseStrategy.UNKNOWN_ARTIST_MARKER,
            )

        if split := _split_on_separator(cleaned):
            title, artist = split
            return EntityHypothesis(title=title, artist=artist or None, strategy=ParseStrategy.SEPARATOR)

        tokens = cleaned.split()
        if len(tokens) >= 2:
            self.logger.debug("No separator in '%s'; guessing last word as artist", cleaned)
            return EntityHypothesis(
                title=" ".join(tokens[:-1]),
                artist=tokens[-1],
                strategy=ParseStrategy.WHITESPACE_SPLIT,
            )

        return EntityHypothesis(title=cleaned, artist=None, strategy=ParseStrategy.VERBATIM)
