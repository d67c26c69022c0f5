import numpy as np
import pytest

from slidem.post_process.regions import DEFAULT_FIT_REGIONS, Direction, FitRegion
from slidem.post_process.scanner import BracketScanner, ScanState, find_brackets

NORTH, SOUTH = DEFAULT_FIT_REGIONS


class TestDirection:
    def test_ascending(self):
        assert Direction.ASCENDING.crossed(49.9, 50.0, 50.0)
        assert not Direction.ASCENDING.crossed(50.0, 50.1, 50.0)
        assert not Direction.ASCENDING.crossed(50.1, 49.9, 50.0)

    def test_descending(self):
        assert Direction.DESCENDING.crossed(-49.9, -50.0, -50.0)
        assert not Direction.DESCENDING.crossed(-50.0, -50.1, -50.0)

    def test_parse(self):
        assert Direction.parse(" Ascending ") is Direction.ASCENDING
        with pytest.raises(ValueError):
            Direction.parse("sideways")


def test_default_regions():
    assert NORTH.label == "Northern ascending"
    assert NORTH.boundaries == (50.0, 51.0, 51.0, 50.0)
    assert NORTH.entry_direction is Direction.ASCENDING
    assert NORTH.exit_direction is Direction.DESCENDING
    assert SOUTH.boundaries == (-50.0, -51.0, -51.0, -50.0)
    assert SOUTH.entry_direction is Direction.DESCENDING


def test_region_from_boundaries_matches_default():
    region = FitRegion.from_boundaries(2, "Southern descending", -50.0, -51.0, -51.0, -50.0)
    assert region == SOUTH


def test_finds_northern_bracket(northern_track):
    times = np.arange(northern_track.size) * 0.5
    brackets = list(find_brackets(times, northern_track, NORTH))
    assert len(brackets) == 1
    bracket = brackets[0]
    assert (bracket.begin0, bracket.begin1, bracket.end0, bracket.end1) == (10, 30, 70, 90)
    assert bracket.times == (5.0, 15.0, 35.0, 45.0)
    assert bracket.span == slice(10, 90)
    assert not list(find_brackets(times, northern_track, SOUTH))


def test_finds_southern_bracket(northern_track):
    times = np.arange(northern_track.size) * 0.5
    brackets = list(find_brackets(times, -northern_track, SOUTH))
    assert [(b.begin0, b.end1) for b in brackets] == [(10, 90)]


def test_two_passes(northern_track):
    track = np.concatenate([northern_track, northern_track])
    times = np.arange(track.size) * 0.5
    brackets = list(find_brackets(times, track, NORTH))
    assert [b.begin0 for b in brackets] == [10, 110]


def test_slow_crossing_resets(northern_track):
    times = np.arange(northern_track.size) * 0.5
    # entry band takes longer than half an orbit
    times[30:] += 3000.0
    assert not list(find_brackets(times, northern_track, NORTH))


def test_new_entry_restarts_search():
    scanner = BracketScanner(NORTH)
    assert scanner.step(0, 0.0, 49.0, 50.5) is None
    assert scanner.state is ScanState.GOT_ENTRY_START
    assert scanner.step(1, 1.0, 50.5, 51.5) is None
    assert scanner.state is ScanState.GOT_ENTRY_END
    # dips back below and re-enters: the search starts over
    assert scanner.step(2, 2.0, 51.5, 49.0) is None
    assert scanner.step(3, 3.0, 49.0, 50.2) is None
    assert scanner.state is ScanState.GOT_ENTRY_START
    assert scanner.step(4, 4.0, 50.2, 51.2) is None
    assert scanner.step(5, 5.0, 51.2, 50.8) is None
    assert scanner.state is ScanState.GOT_EXIT_START
    bracket = scanner.step(6, 6.0, 50.8, 49.5)
    assert bracket is not None
    assert (bracket.begin0, bracket.begin1, bracket.end0, bracket.end1) == (3, 4, 5, 6)
    assert scanner.state is ScanState.IDLE
