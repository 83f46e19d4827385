"""Tests for domain records and track-list representations."""

from __future__ import annotations

import pytest

from playrate.core.models.music import (
    INT32_MAX,
    UNKNOWN_ARTIST,
    Candidate,
    EntityHypothesis,
    EntityKind,
    MusicEntity,
    PreformattedTrackList,
    ReleaseDatePrecision,
    TrackSummary,
    TrackSummaryList,
    clamp_to_int32,
    render_track_listing,
    to_track_listing,
)


@pytest.mark.unit
class TestTrackListing:
    """Tests for the tagged track-list variant."""

    def test_string_becomes_preformatted(self) -> None:
        """A display string is kept verbatim."""
        listing = to_track_listing("1. Intro\n2. Outro")

        assert listing == PreformattedTrackList(text="1. Intro\n2. Outro")
        assert render_track_listing(listing) == "1. Intro\n2. Outro"

    def test_mappings_become_summaries(self) -> None:
        """Mappings with name/title keys become summaries; others are skipped."""
        listing = to_track_listing([{"name": "Intro", "track_number": 1}, {"title": "Outro"}, {"other": 1}])

        assert isinstance(listing, TrackSummaryList)
        assert listing.items == (TrackSummary(title="Intro", track_number=1), TrackSummary(title="Outro"))
        assert render_track_listing(listing) == "1. Intro\nOutro"

    def test_strings_in_list(self) -> None:
        """Plain strings in a list become titles."""
        listing = to_track_listing(["A", "B"])

        assert isinstance(listing, TrackSummaryList)
        assert [item.title for item in listing.items] == ["A", "B"]

    @pytest.mark.parametrize("raw", [None, 42, {"name": "not a list"}])
    def test_unknown_shapes(self, raw: object) -> None:
        """Anything else has no track list."""
        assert to_track_listing(raw) is None
        assert render_track_listing(None) == ""

    def test_already_resolved_passes_through(self) -> None:
        """A resolved listing is returned unchanged."""
        listing = TrackSummaryList(items=(TrackSummary(title="A"),))

        assert to_track_listing(listing) is listing


@pytest.mark.unit
class TestRecords:
    """Tests for small record behaviors."""

    def test_candidate_popularity_clamped(self) -> None:
        """Popularity stays within 0-100."""
        assert Candidate(id="1", title="x", popularity=150).popularity == 100
        assert Candidate(id="1", title="x", popularity=-3).popularity == 0

    def test_artist_display(self) -> None:
        """Artists are comma-joined; none renders the unknown marker."""
        assert MusicEntity(id="1", kind=EntityKind.TRACK, title="x", artists=("A", "B")).artist_display == "A, B"
        assert MusicEntity(id="1", kind=EntityKind.TRACK, title="x").artist_display == UNKNOWN_ARTIST

    def test_hypothesis_has_artist(self) -> None:
        """An empty artist does not count."""
        assert EntityHypothesis(title="x", artist="y").has_artist
        assert not EntityHypothesis(title="x", artist="").has_artist

    def test_unknown_artist_is_not_an_artist(self) -> None:
        """The unknown-artist marker is left out of the search query."""
        hypothesis = EntityHypothesis(title="Dream On", artist=UNKNOWN_ARTIST)

        assert not hypothesis.has_artist
        assert hypothesis.search_query == "Dream On"

    @pytest.mark.parametrize(("value", "expected"), [("DAY", ReleaseDatePrecision.DAY), ("week", None), (None, None)])
    def test_precision_parse(self, value: str | None, expected: ReleaseDatePrecision | None) -> None:
        """Precision labels parse case-insensitively."""
        assert ReleaseDatePrecision.parse(value) is expected

    def test_clamp_to_int32(self) -> None:
        """Values outside the signed 32-bit range are clamped."""
        assert clamp_to_int32(None) is None
        assert clamp_to_int32(5) == 5
        assert clamp_to_int32(10**12) == INT32_MAX
        assert clamp_to_int32(-(10**12)) == -INT32_MAX - 1
