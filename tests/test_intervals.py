"""Tests for the half-open interval model."""

from datetime import date, datetime, time

import pytest

from errors import InvalidInterval
from intervals import Interval, overlaps


def at(hour, minute=0):
    return datetime(2030, 1, 14, hour, minute)


def test_touching_intervals_do_not_overlap():
    a = Interval(at(9), at(10))
    b = Interval(at(10), at(11))
    assert not overlaps(a, b)
    assert not overlaps(b, a)


def test_partial_overlap_is_symmetric():
    a = Interval(at(9), at(10, 30))
    b = Interval(at(10), at(11))
    assert overlaps(a, b)
    assert overlaps(b, a)


@pytest.mark.parametrize("start, end", [
    ((9, 30), (9, 45)),    # inside
    ((8, 0), (12, 0)),     # contains
    ((8, 0), (9, 1)),      # ends during
    ((9, 59), (11, 0)),    # starts during
    ((9, 0), (10, 0)),     # identical
])
def test_overlap_shapes(start, end):
    existing = Interval(at(9), at(10))
    assert Interval(at(*start), at(*end)).overlaps(existing)


def test_disjoint_intervals():
    assert not overlaps(Interval(at(9), at(10)), Interval(at(13), at(14)))


@pytest.mark.parametrize("start, end", [(at(10), at(10)), (at(11), at(10))])
def test_end_must_follow_start(start, end):
    with pytest.raises(InvalidInterval):
        Interval(start, end)


def test_on_day_combines_wall_clock_times():
    interval = Interval.on_day(date(2030, 1, 14), time(14, 0), time(15, 30))
    assert interval.start == at(14)
    assert interval.end == at(15, 30)
