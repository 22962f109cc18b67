"""
Overlap detection

Half-open interval model used by every write path:
- `overlaps` is the primitive test between two [start, end) ranges
- `any_overlap` checks a candidate against a collection of blocks
- `classify_conflicts` reports availability / time-off / appointment
  conflicts separately so callers can decide what blocks and what warns

Blocks can be ORM rows, dicts, or anything exposing `start_time`/`end_time`
(or `start`/`end`) and, optionally, `id`.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, NamedTuple

from app.scheduling.exceptions import InvalidIntervalError, TimestampParseError


class Interval(NamedTuple):
    start: datetime
    end: datetime

    @property
    def duration(self):
        return self.end - self.start


@dataclass(frozen=True)
class ConflictReport:
    availability: bool
    time_off: bool
    appointments: bool
    any: bool


def parse_instant(value: datetime | str) -> datetime:
    """
    Normalize a timestamp to an aware UTC datetime.

    Naive datetimes are taken as UTC (that is how rows are stored).
    Strings must be ISO-8601; anything else raises TimestampParseError.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise TimestampParseError(f"Invalid timestamp: {value!r}") from e
    elif not isinstance(value, datetime):
        raise TimestampParseError(f"Cannot read {type(value).__name__} as a timestamp")
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def block_field(block: Any, *names: str) -> Any:
    for name in names:
        if isinstance(block, Mapping):
            if name in block:
                return block[name]
        elif hasattr(block, name):
            return getattr(block, name)
    return None


def block_id(block: Any) -> Any:
    return block_field(block, "id")


def validate_interval(start: datetime | str, end: datetime | str) -> Interval:
    """Parse both ends and reject ranges where end <= start."""
    interval = Interval(parse_instant(start), parse_instant(end))
    if interval.end <= interval.start:
        raise InvalidIntervalError(
            f"End time must be after start time ({interval.start.isoformat()} >= {interval.end.isoformat()})"
        )
    return interval


def block_interval(block: Any) -> Interval:
    start = block_field(block, "start_time", "start")
    end = block_field(block, "end_time", "end")
    if start is None or end is None:
        raise TimestampParseError("Block is missing start or end")
    return Interval(parse_instant(start), parse_instant(end))


def overlaps(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """
    True iff [a_start, a_end) and [b_start, b_end) share an instant.

    Touching endpoints (one ends exactly when the other starts) do not overlap.
    Inputs are not validated here.
    """
    return a_start < b_end and b_start < a_end


def any_overlap(
    candidate_start: datetime | str,
    candidate_end: datetime | str,
    blocks: Iterable[Any],
    exclude_id: Any = None,
) -> bool:
    """
    True if the candidate overlaps any block except the one with `exclude_id`.

    `exclude_id` is used when editing a block so it is not compared with itself.
    """
    candidate = validate_interval(candidate_start, candidate_end)
    for block in blocks:
        if exclude_id is not None and block_id(block) is not None and str(block_id(block)) == str(exclude_id):
            continue
        interval = block_interval(block)
        if overlaps(candidate.start, candidate.end, interval.start, interval.end):
            return True
    return False


def classify_conflicts(
    candidate_start: datetime | str,
    candidate_end: datetime | str,
    availability: Iterable[Any],
    time_off: Iterable[Any],
    appointments: Iterable[Any],
    exclude_id: Any = None,
) -> ConflictReport:
    availability_conflict = any_overlap(candidate_start, candidate_end, availability, exclude_id)
    time_off_conflict = any_overlap(candidate_start, candidate_end, time_off, exclude_id)
    appointment_conflict = any_overlap(candidate_start, candidate_end, appointments, exclude_id)
    return ConflictReport(
        availability=availability_conflict,
        time_off=time_off_conflict,
        appointments=appointment_conflict,
        any=availability_conflict or time_off_conflict or appointment_conflict,
    )
