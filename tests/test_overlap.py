"""
Tests for scheduling/overlap.py

Half-open overlap rules, collection checks and conflict classification.
"""

from datetime import UTC, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.scheduling.exceptions import InvalidIntervalError, TimestampParseError
from app.scheduling.overlap import (
    any_overlap,
    classify_conflicts,
    overlaps,
    parse_instant,
    validate_interval,
)


def at(hour: int, minute: int = 0, day: int = 12) -> datetime:
    return datetime(2023, 10, day, hour, minute, tzinfo=UTC)


PAIRS = [
    (at(9), at(10), at(9, 30), at(10, 30)),
    (at(9), at(10), at(10), at(11)),
    (at(9), at(17), at(12), at(13)),
    (at(9), at(10), at(11), at(12)),
    (at(9), at(10), at(9), at(10)),
]


@pytest.mark.parametrize("a_start,a_end,b_start,b_end", PAIRS)
def test_overlap_is_symmetric(a_start, a_end, b_start, b_end):
    assert overlaps(a_start, a_end, b_start, b_end) == overlaps(b_start, b_end, a_start, a_end)


def test_touching_endpoints_do_not_overlap():
    assert not overlaps(at(9), at(10), at(10), at(11))
    assert not overlaps(at(10), at(11), at(9), at(10))


def test_disjoint_intervals_do_not_overlap():
    assert not overlaps(at(9), at(10), at(11), at(12))


def test_shared_interior_instant_overlaps():
    assert overlaps(at(9), at(10), at(9, 59), at(11))
    assert overlaps(at(9), at(17), at(12), at(13))  # containment
    assert overlaps(at(9), at(10), at(9), at(10))  # identical


def test_any_overlap_scenario_partial_overlap():
    existing = [{"id": "a", "start_time": "2023-10-12T09:30:00Z", "end_time": "2023-10-12T10:30:00Z"}]
    assert any_overlap("2023-10-12T09:00:00Z", "2023-10-12T10:00:00Z", existing)


def test_any_overlap_scenario_adjacent():
    existing = [{"id": "a", "start_time": "2023-10-12T09:00:00Z", "end_time": "2023-10-12T10:00:00Z"}]
    assert not any_overlap("2023-10-12T10:00:00Z", "2023-10-12T11:00:00Z", existing)


def test_any_overlap_empty_collection():
    assert not any_overlap(at(9), at(10), [])


def test_any_overlap_excludes_block_being_edited():
    existing = [
        {"id": "self", "start_time": at(9), "end_time": at(10)},
        {"id": "other", "start_time": at(11), "end_time": at(12)},
    ]
    assert not any_overlap(at(9), at(10, 30), existing, exclude_id="self")
    assert any_overlap(at(9), at(11, 30), existing, exclude_id="self")


def test_any_overlap_ignores_collection_order():
    blocks = [
        {"id": 1, "start_time": at(7), "end_time": at(8)},
        {"id": 2, "start_time": at(12), "end_time": at(14)},
        {"id": 3, "start_time": at(15), "end_time": at(16)},
    ]
    assert any_overlap(at(13), at(13, 30), blocks)
    assert any_overlap(at(13), at(13, 30), list(reversed(blocks)))


def test_any_overlap_reads_objects_and_start_end_keys():
    rows = [SimpleNamespace(id=1, start_time=at(9), end_time=at(10))]
    plain = [{"start": at(9), "end": at(10)}]
    assert any_overlap(at(9, 30), at(11), rows)
    assert any_overlap(at(9, 30), at(11), plain)


@pytest.mark.parametrize("start,end", [(at(10), at(10)), (at(11), at(10))])
def test_any_overlap_rejects_empty_or_inverted_candidate(start, end):
    with pytest.raises(InvalidIntervalError):
        any_overlap(start, end, [])


def test_any_overlap_propagates_unparseable_timestamps():
    with pytest.raises(TimestampParseError):
        any_overlap("not-a-date", "2023-10-12T10:00:00Z", [])
    with pytest.raises(TimestampParseError):
        any_overlap(at(9), at(10), [{"start_time": "yesterday", "end_time": "2023-10-12T10:00:00Z"}])


def test_parse_instant_normalizes_to_utc():
    assert parse_instant("2023-10-12T09:00:00Z") == at(9)
    assert parse_instant("2023-10-12T11:00:00+02:00") == at(9)
    assert parse_instant(datetime(2023, 10, 12, 9, 0)) == at(9)
    assert parse_instant(datetime(2023, 10, 12, 4, 0, tzinfo=timezone(timedelta(hours=-5)))) == at(9)
    assert parse_instant("2023-10-12T09:00:00Z").tzinfo is not None


def test_parse_instant_rejects_non_timestamps():
    with pytest.raises(TimestampParseError):
        parse_instant("2023-13-45T99:00:00Z")
    with pytest.raises(TimestampParseError):
        parse_instant(12345)


def test_validate_interval():
    interval = validate_interval("2023-10-12T09:00:00Z", "2023-10-12T10:00:00Z")
    assert interval.duration == timedelta(hours=1)
    with pytest.raises(InvalidIntervalError):
        validate_interval(at(10), at(9))


def test_classify_conflicts_reports_each_collection():
    availability = [{"id": "a1", "start_time": at(8), "end_time": at(9)}]
    time_off = [{"id": "t1", "start_time": at(12), "end_time": at(13)}]
    appointments = [{"id": "p1", "start_time": at(14), "end_time": at(15)}]

    report = classify_conflicts(at(12, 30), at(14, 30), availability, time_off, appointments)
    assert not report.availability
    assert report.time_off
    assert report.appointments
    assert report.any


def test_classify_conflicts_no_conflict():
    report = classify_conflicts(at(9), at(10), [], [{"start_time": at(10), "end_time": at(11)}], [])
    assert not report.availability
    assert not report.time_off
    assert not report.appointments
    assert not report.any
