"""
Recurrence Projection

Recurrence tags arrive as strings ("none", "daily", "weekly",
"weekly:1,2,3,4,5") and are parsed once, at the boundary, into a small
tagged variant. Projection turns an anchor block plus a day range into
the concrete occurrences that recurrence implies.

Weekday numbers follow the 0 = Sunday ... 6 = Saturday convention used by
the stored tags.
"""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any, Iterator, NamedTuple, Union

import pytz

from app.scheduling.exceptions import InvalidIntervalError, InvalidRecurrenceError
from app.scheduling.overlap import Interval, block_field, block_id, block_interval, overlaps, parse_instant

ALL_WEEKDAYS = frozenset(range(7))
WEEKLY_PREFIX = "weekly:"


@dataclass(frozen=True)
class NoRecurrence:
    pass


@dataclass(frozen=True)
class Daily:
    pass


@dataclass(frozen=True)
class Weekly:
    days: frozenset[int] = ALL_WEEKDAYS


Recurrence = Union[NoRecurrence, Daily, Weekly]


class Occurrence(NamedTuple):
    """A projected occurrence, still tagged with the id of the block it came from."""

    start: datetime
    end: datetime
    id: Any = None


def parse_recurrence(tag: str | Recurrence | None) -> Recurrence:
    """
    Parse a stored recurrence tag.

    - None, "" or "none" -> NoRecurrence
    - "daily" -> Daily
    - "weekly" -> Weekly on all seven days (legacy shorthand)
    - "weekly:<d1,d2,...>" -> Weekly on the listed days
    - anything else -> NoRecurrence

    A weekly day list with values outside 0-6 (or not integers) raises
    InvalidRecurrenceError, as does a tag that is not a string. Duplicates
    are ignored.
    """
    if isinstance(tag, (NoRecurrence, Daily, Weekly)):
        return tag
    if tag is None:
        return NoRecurrence()
    if not isinstance(tag, str):
        raise InvalidRecurrenceError(f"Recurrence tag must be a string, got {type(tag).__name__}")
    tag = tag.strip().lower()
    if not tag:
        return NoRecurrence()
    if tag == "daily":
        return Daily()
    if tag == "weekly":
        return Weekly(ALL_WEEKDAYS)
    if tag.startswith(WEEKLY_PREFIX):
        raw_days = [part.strip() for part in tag[len(WEEKLY_PREFIX):].split(",")]
        try:
            days = frozenset(int(part) for part in raw_days)
        except ValueError as e:
            raise InvalidRecurrenceError(f"Weekday list must be integers 0-6: {tag!r}") from e
        if not days or not days <= ALL_WEEKDAYS:
            raise InvalidRecurrenceError(f"Weekday list must be integers 0-6: {tag!r}")
        return Weekly(days)
    return NoRecurrence()


def format_recurrence(recurrence: Recurrence) -> str:
    """Canonical tag for a parsed recurrence (inverse of parse_recurrence)."""
    if isinstance(recurrence, Daily):
        return "daily"
    if isinstance(recurrence, Weekly):
        return WEEKLY_PREFIX + ",".join(str(d) for d in sorted(recurrence.days))
    return "none"


def weekday_number(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7


def get_timezone(tz: str | tzinfo | None) -> tzinfo:
    if tz is None:
        return pytz.UTC
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def day_start(day: date, tz: tzinfo) -> datetime:
    """Midnight of `day` in `tz`, as an aware UTC instant."""
    midnight = datetime.combine(day, time.min)
    if hasattr(tz, "localize"):
        local = tz.localize(midnight)
    else:
        local = midnight.replace(tzinfo=tz)
    return local.astimezone(UTC)


def day_window(day: date, tz: tzinfo) -> Interval:
    return Interval(day_start(day, tz), day_start(day + timedelta(days=1), tz))


def to_local_date(value: date | datetime | str, tz: tzinfo) -> date:
    """
    Calendar day in `tz`. Dates and date-only strings ("2023-10-12") already
    name a local day; instants are converted.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    return parse_instant(value).astimezone(tz).date()


def iter_days(first: date, last: date) -> Iterator[date]:
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def _time_of_day_offset(instant: datetime, tz: tzinfo) -> timedelta:
    local = instant.astimezone(tz)
    return timedelta(
        hours=local.hour,
        minutes=local.minute,
        seconds=local.second,
        microseconds=local.microsecond,
    )


def _day_matches(recurrence: Recurrence, day: date) -> bool:
    if isinstance(recurrence, Daily):
        return True
    if isinstance(recurrence, Weekly):
        return weekday_number(day) in recurrence.days
    return False


def project_occurrences(
    block: Any,
    range_start: date | datetime | str,
    range_end: date | datetime | str,
    tz: str | tzinfo | None = None,
) -> list[Interval]:
    """
    Expand one block over the calendar days [range_start, range_end] (inclusive).

    Non-recurring blocks yield their own [start, end) if it intersects the
    range. Recurring blocks yield one occurrence per qualifying day, placed at
    that day's midnight plus the anchor's time-of-day, lasting exactly the
    anchor's duration. Where the anchor itself falls does not matter.

    Results are ascending by start and recomputed on every call.
    """
    tz = get_timezone(tz)
    anchor = block_interval(block)
    if anchor.end <= anchor.start:
        raise InvalidIntervalError(f"Block {block_id(block)!r} ends before it starts")
    recurrence = parse_recurrence(block_field(block, "recurrence"))

    first_day = to_local_date(range_start, tz)
    last_day = to_local_date(range_end, tz)
    if last_day < first_day:
        return []

    if isinstance(recurrence, NoRecurrence):
        window = Interval(day_start(first_day, tz), day_start(last_day + timedelta(days=1), tz))
        if overlaps(anchor.start, anchor.end, window.start, window.end):
            return [anchor]
        return []

    offset = _time_of_day_offset(anchor.start, tz)
    duration = anchor.end - anchor.start
    occurrences = []
    for day in iter_days(first_day, last_day):
        if not _day_matches(recurrence, day):
            continue
        start = day_start(day, tz) + offset
        occurrences.append(Interval(start, start + duration))
    return occurrences


def expand_blocks(
    blocks: Any,
    range_start: date | datetime | str,
    range_end: date | datetime | str,
    tz: str | tzinfo | None = None,
) -> list[Occurrence]:
    """Project every block and keep each occurrence tagged with its block id."""
    expanded = []
    for block in blocks:
        bid = block_id(block)
        for occurrence in project_occurrences(block, range_start, range_end, tz):
            expanded.append(Occurrence(occurrence.start, occurrence.end, bid))
    expanded.sort(key=lambda o: (o.start, o.end))
    return expanded
