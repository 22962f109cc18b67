"""
Free-slot aggregation

Builds the open windows of a single day:
1. Project availability onto the day and merge into maximal windows
2. Project time-off onto the day; take appointments as they are
3. Subtract the busy intervals from the availability windows
4. Return disjoint windows in ascending order
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

from app.scheduling.overlap import Interval, block_interval, overlaps
from app.scheduling.recurrence import day_window, get_timezone, project_occurrences, to_local_date


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Join overlapping or adjacent intervals.

    Returns a new ascending list; the input is not modified.
    """
    ordered = sorted(intervals)
    if not ordered:
        return []

    merged = [ordered[0]]
    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = Interval(last.start, current.end)
        else:
            merged.append(current)
    return merged


def subtract_interval(interval: Interval, block: Interval) -> list[Interval]:
    """
    Remove `block` from `interval`.

    Returns 0, 1 or 2 intervals:
    1. no overlap -> [interval]
    2. block covers interval -> []
    3. block covers the start -> [tail]
    4. block covers the end -> [head]
    5. block inside -> [head, tail]
    """
    if not overlaps(interval.start, interval.end, block.start, block.end):
        return [interval]

    remainder = []
    if block.start > interval.start:
        remainder.append(Interval(interval.start, block.start))
    if block.end < interval.end:
        remainder.append(Interval(block.end, interval.end))
    return remainder


def subtract_all(windows: Iterable[Interval], busy: Iterable[Interval]) -> list[Interval]:
    result = list(windows)
    for block in merge_intervals(busy):
        next_result = []
        for window in result:
            next_result.extend(subtract_interval(window, block))
        result = next_result
    return sorted(result)


def clip_to(interval: Interval, window: Interval) -> Interval | None:
    start = max(interval.start, window.start)
    end = min(interval.end, window.end)
    if start >= end:
        return None
    return Interval(start, end)


def project_onto_day(blocks: Iterable[Any], day: date, tz: tzinfo) -> list[Interval]:
    """
    Occurrences of `blocks` that touch `day`, clipped to the day.

    Scanning starts early enough to catch occurrences that begin on an
    earlier day and run past midnight.
    """
    window = day_window(day, tz)
    projected = []
    for block in blocks:
        anchor = block_interval(block)
        lookback = timedelta(days=(anchor.end - anchor.start).days + 1)
        for occurrence in project_occurrences(block, day - lookback, day, tz):
            clipped = clip_to(occurrence, window)
            if clipped is not None:
                projected.append(clipped)
    return projected


def get_available_time_slots(
    availability: Iterable[Any],
    time_off: Iterable[Any],
    appointments: Iterable[Any],
    day: date | datetime | str,
    tz: str | tzinfo | None = None,
) -> list[Interval]:
    """
    Open windows on `day`: projected availability minus time-off and appointments.

    Appointments carry no recurrence and are used as-is when they fall on the
    day. Boundaries are half-open, so a window ending when a busy interval
    starts is kept whole. An empty list means no availability or fully booked.
    """
    tz = get_timezone(tz)
    day = to_local_date(day, tz)
    window = day_window(day, tz)

    open_windows = merge_intervals(project_onto_day(availability, day, tz))
    if not open_windows:
        return []

    busy = project_onto_day(time_off, day, tz)
    for appointment in appointments:
        clipped = clip_to(block_interval(appointment), window)
        if clipped is not None:
            busy.append(clipped)

    return subtract_all(open_windows, busy)
