"""Unit tests for the active-cue lookup.

WHY: find_active() runs on every position update. An off-by-one at a cue
boundary highlights the wrong line; a wrong overlap rule makes the
highlight jump back and forth.

HOW: Tests are organized by concern:
  - TestBoundaries: half-open [start, end) intervals and gaps
  - TestOverlap: latest start wins among running cues
  - TestInvalidTimes: non-numeric, boolean and NaN positions
  - TestSnippets: snippet building and id lookup
"""

import math

import pytest

from transcript_sync.core.ir import Cue
from transcript_sync.core.snippets import SnippetIndex


def _cue(cue_id: int, start: float, end: float, text: str = "text") -> Cue:
    return Cue(
        id=cue_id,
        start_time=start,
        end_time=end,
        raw_text=text,
        display_text=text,
        plain_text=text,
    )


# ---------------------------------------------------------------------------
# TestBoundaries
# ---------------------------------------------------------------------------


class TestBoundaries:
    """A cue is active from its start (inclusive) to its end (exclusive)."""

    @pytest.fixture
    def index(self):
        return SnippetIndex([_cue(0, 0.0, 5.0), _cue(1, 5.0, 10.0), _cue(2, 12.0, 15.0)])

    @pytest.mark.parametrize("time, expected", [
        (0.0, 0),
        (4.999, 0),
        (5.0, 1),
        (9.999, 1),
        (10.0, None),
        (11.0, None),
        (12.0, 2),
        (15.0, None),
        (-1.0, None),
        (1000.0, None),
    ])
    def test_find_active(self, index, time, expected):
        assert index.find_active(time) == expected

    def test_integer_positions(self, index):
        assert index.find_active(7) == 1

    def test_empty_index(self):
        assert SnippetIndex().find_active(1.0) is None
        assert len(SnippetIndex()) == 0


# ---------------------------------------------------------------------------
# TestOverlap
# ---------------------------------------------------------------------------


class TestOverlap:
    """Among cues containing the position, the latest start wins."""

    def test_nested_cue_wins_while_running(self):
        index = SnippetIndex([_cue(0, 0.0, 10.0), _cue(1, 3.0, 6.0)])
        assert index.find_active(2.0) == 0
        assert index.find_active(4.0) == 1
        assert index.find_active(7.0) == 0

    def test_equal_starts_resolve_to_later_cue(self):
        index = SnippetIndex([_cue(0, 2.0, 8.0), _cue(1, 2.0, 4.0)])
        assert index.find_active(3.0) == 1
        assert index.find_active(5.0) == 0

    def test_long_cue_behind_many_short_ones(self):
        cues = [_cue(0, 0.0, 100.0)] + [
            _cue(i, float(i * 10), float(i * 10 + 1)) for i in range(1, 9)
        ]
        index = SnippetIndex(cues)
        assert index.find_active(10.5) == 1
        assert index.find_active(55.0) == 0

    def test_rebuild_sorts_by_start(self):
        index = SnippetIndex([_cue(1, 5.0, 10.0), _cue(0, 0.0, 5.0)])
        assert [cue.id for cue in index] == [0, 1]
        assert index.find_active(6.0) == 1


# ---------------------------------------------------------------------------
# TestInvalidTimes
# ---------------------------------------------------------------------------


class TestInvalidTimes:
    """Unusable positions never select a cue."""

    @pytest.mark.parametrize("time", [math.nan, None, "3.0", True, False, [1.0]])
    def test_invalid_time(self, time):
        index = SnippetIndex([_cue(0, 0.0, 5.0)])
        assert index.find_active(time) is None


# ---------------------------------------------------------------------------
# TestSnippets
# ---------------------------------------------------------------------------


class TestSnippets:
    """snippet() builds the interactive-view unit for one cue."""

    def test_snippet_from_sample(self, sample_cues):
        index = SnippetIndex(sample_cues)
        snippet = index.snippet(0)
        assert snippet.cue_id == 0
        assert snippet.speaker == "Alice"
        assert snippet.text == sample_cues[0].display_text
        assert snippet.timestamp is None

    def test_snippet_with_timestamp(self, sample_cues):
        index = SnippetIndex(sample_cues)
        assert index.snippet(2, timestamp=True).timestamp == "00:12"

    def test_long_timestamp_label(self):
        index = SnippetIndex([_cue(0, 3723.4, 3725.0)])
        assert index.snippet(0, timestamp=True).timestamp == "1:02:03"

    def test_unknown_id(self, sample_cues):
        index = SnippetIndex(sample_cues)
        assert index.snippet(99) is None
        assert index.find_by_id(99) is None

    def test_find_by_id(self, sample_cues):
        index = SnippetIndex(sample_cues)
        assert index.find_by_id(1) is sample_cues[1]
