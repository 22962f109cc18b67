"""
Tests for scheduling/slots.py

Interval merging/subtraction and free-slot aggregation for a day.
"""

from datetime import UTC, date, datetime

import pytest
import pytz

from app.scheduling.overlap import Interval
from app.scheduling.slots import get_available_time_slots, merge_intervals, subtract_interval

DAY = date(2023, 10, 12)  # a Thursday


def at(hour: int, minute: int = 0, day: int = 12) -> datetime:
    return datetime(2023, 10, day, hour, minute, tzinfo=UTC)


def block(start, end, recurrence="none"):
    return {"start_time": start, "end_time": end, "recurrence": recurrence}


def test_merge_intervals_no_overlap():
    intervals = [Interval(at(11), at(12)), Interval(at(9), at(10))]
    assert merge_intervals(intervals) == [Interval(at(9), at(10)), Interval(at(11), at(12))]


def test_merge_intervals_overlapping_and_adjacent():
    intervals = [Interval(at(9), at(12)), Interval(at(11), at(14)), Interval(at(14), at(15))]
    assert merge_intervals(intervals) == [Interval(at(9), at(15))]


def test_merge_intervals_contained():
    assert merge_intervals([Interval(at(9), at(17)), Interval(at(10), at(11))]) == [Interval(at(9), at(17))]


def test_merge_intervals_empty():
    assert merge_intervals([]) == []


@pytest.mark.parametrize(
    "busy,expected",
    [
        (Interval(at(18), at(19)), [Interval(at(9), at(17))]),
        (Interval(at(8), at(18)), []),
        (Interval(at(8), at(10)), [Interval(at(10), at(17))]),
        (Interval(at(16), at(18)), [Interval(at(9), at(16))]),
        (Interval(at(12), at(13)), [Interval(at(9), at(12)), Interval(at(13), at(17))]),
        (Interval(at(17), at(18)), [Interval(at(9), at(17))]),
    ],
)
def test_subtract_interval(busy, expected):
    assert subtract_interval(Interval(at(9), at(17)), busy) == expected


def test_lunch_time_off_splits_the_day():
    slots = get_available_time_slots(
        availability=[block(at(9), at(17))],
        time_off=[block(at(12), at(13))],
        appointments=[],
        day=DAY,
    )
    assert slots == [Interval(at(9), at(12)), Interval(at(13), at(17))]


def test_fully_booked_window_is_empty():
    slots = get_available_time_slots(
        availability=[block(at(9), at(10))],
        time_off=[],
        appointments=[{"start_time": at(9), "end_time": at(10), "status": "scheduled"}],
        day=DAY,
    )
    assert slots == []


def test_no_availability_is_empty():
    assert get_available_time_slots([], [block(at(12), at(13))], [], DAY) == []


def test_recurring_availability_anchored_elsewhere():
    weekdays = block(datetime(2023, 1, 2, 9, tzinfo=UTC), datetime(2023, 1, 2, 17, tzinfo=UTC), "weekly:1,2,3,4,5")

    assert get_available_time_slots([weekdays], [], [], DAY) == [Interval(at(9), at(17))]
    assert get_available_time_slots([weekdays], [], [], date(2023, 10, 15)) == []  # Sunday


def test_recurring_time_off_and_appointments_subtract():
    availability = [block(at(9, day=2), at(17, day=2), "daily")]
    lunch = [block(at(12, day=2), at(13, day=2), "daily")]
    appointments = [
        {"start_time": "2023-10-12T10:00:00Z", "end_time": "2023-10-12T10:30:00Z"},
        {"start_time": "2023-10-13T15:00:00Z", "end_time": "2023-10-13T16:00:00Z"},  # other day
    ]

    slots = get_available_time_slots(availability, lunch, appointments, DAY)

    assert slots == [
        Interval(at(9), at(10)),
        Interval(at(10, 30), at(12)),
        Interval(at(13), at(17)),
    ]


def test_overlapping_availability_blocks_are_merged():
    availability = [block(at(9), at(12)), block(at(11), at(14)), block(at(14), at(15))]
    assert get_available_time_slots(availability, [], [], DAY) == [Interval(at(9), at(15))]


def test_busy_interval_touching_window_leaves_it_whole():
    slots = get_available_time_slots(
        availability=[block(at(9), at(17))],
        time_off=[block(at(8), at(9)), block(at(17), at(18))],
        appointments=[],
        day=DAY,
    )
    assert slots == [Interval(at(9), at(17))]


def test_several_busy_intervals():
    slots = get_available_time_slots(
        availability=[block(at(9), at(17))],
        time_off=[block(at(15), at(16))],
        appointments=[
            {"start_time": at(10), "end_time": at(11)},
            {"start_time": at(10, 30), "end_time": at(12)},
        ],
        day=DAY,
    )
    assert slots == [Interval(at(9), at(10)), Interval(at(12), at(15)), Interval(at(16), at(17))]


def test_overnight_availability_spills_into_next_day():
    late_shift = block(at(22, day=11), at(2), "daily")
    slots = get_available_time_slots([late_shift], [], [], DAY)
    assert slots == [Interval(at(0), at(2)), Interval(at(22), at(0, day=13))]


def test_accepts_iso_strings_for_day():
    slots = get_available_time_slots([block(at(9), at(17))], [], [], "2023-10-12T08:00:00Z")
    assert slots == [Interval(at(9), at(17))]


def test_date_only_string_is_a_local_day_west_of_utc():
    tz = pytz.timezone("America/New_York")
    start = tz.localize(datetime(2023, 10, 12, 9, 0))
    end = tz.localize(datetime(2023, 10, 12, 17, 0))

    slots = get_available_time_slots([block(start, end)], [], [], "2023-10-12", "America/New_York")

    assert slots == [Interval(start.astimezone(UTC), end.astimezone(UTC))]
    assert get_available_time_slots([block(start, end)], [], [], "2023-10-12", tz) == slots
