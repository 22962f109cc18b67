"""
Conflict checks involving recurring blocks

`any_overlap` compares raw [start, end) pairs. When either side recurs, both
sides are first projected over the days where a clash could show up, then
compared occurrence by occurrence.

Daily and weekly patterns repeat every seven days, so one week (plus a
margin for blocks that run past midnight) is enough to compare two recurring
blocks. A one-off block only needs the days it touches.
"""

from collections.abc import Iterable
from datetime import date, timedelta, tzinfo
from typing import Any

from app.scheduling.overlap import (
    ConflictReport,
    Interval,
    any_overlap,
    block_field,
    block_id,
    block_interval,
    validate_interval,
)
from app.scheduling.recurrence import (
    NoRecurrence,
    expand_blocks,
    get_timezone,
    parse_recurrence,
    project_occurrences,
)

DAYS_PER_WEEK = 7


def _is_recurring(block: Any) -> bool:
    return not isinstance(parse_recurrence(block_field(block, "recurrence")), NoRecurrence)


def _local_span(interval: Interval, tz: tzinfo, margin: int) -> tuple[date, date]:
    first = interval.start.astimezone(tz).date() - timedelta(days=margin)
    last = interval.end.astimezone(tz).date() + timedelta(days=margin)
    return first, last


def _check_windows(candidate: Any, others: list[Any], tz: tzinfo) -> list[tuple[date, date]]:
    anchor = block_interval(candidate)
    # Occurrences can start this many days before the day they collide on
    margin = max(
        [(block_interval(b).end - block_interval(b).start).days for b in others] + [anchor.duration.days]
    ) + 1

    if not _is_recurring(candidate):
        return [_local_span(anchor, tz, margin)]

    first, _ = _local_span(anchor, tz, margin)
    windows = [(first, first + timedelta(days=DAYS_PER_WEEK + 2 * margin))]
    for other in others:
        if not _is_recurring(other):
            windows.append(_local_span(block_interval(other), tz, margin))
    return windows


def recurring_overlap(
    candidate: Any,
    blocks: Iterable[Any],
    tz: str | tzinfo | None = None,
    exclude_id: Any = None,
) -> bool:
    """
    True if any occurrence of `candidate` overlaps any occurrence of `blocks`.

    `candidate` and `blocks` are block-shaped (start/end plus an optional
    recurrence tag). The block whose id equals `exclude_id` is ignored.
    """
    tz = get_timezone(tz)
    validate_interval(*block_interval(candidate))
    others = [
        b for b in blocks
        if exclude_id is None or block_id(b) is None or str(block_id(b)) != str(exclude_id)
    ]
    if not others:
        return False

    for first, last in _check_windows(candidate, others, tz):
        expanded = expand_blocks(others, first, last, tz)
        for occurrence in project_occurrences(candidate, first, last, tz):
            if any_overlap(occurrence.start, occurrence.end, expanded):
                return True
    return False


def classify_block_conflicts(
    candidate: Any,
    availability: Iterable[Any],
    time_off: Iterable[Any],
    appointments: Iterable[Any],
    tz: str | tzinfo | None = None,
    exclude_id: Any = None,
) -> ConflictReport:
    """`classify_conflicts` for a candidate that may recur."""
    availability_conflict = recurring_overlap(candidate, availability, tz, exclude_id)
    time_off_conflict = recurring_overlap(candidate, time_off, tz, exclude_id)
    appointment_conflict = recurring_overlap(candidate, appointments, tz, exclude_id)
    return ConflictReport(
        availability=availability_conflict,
        time_off=time_off_conflict,
        appointments=appointment_conflict,
        any=availability_conflict or time_off_conflict or appointment_conflict,
    )
