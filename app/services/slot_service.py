from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.appointment import NON_BLOCKING_STATUSES, Appointment
from app.models.availability import Availability
from app.models.time_block import TimeBlockCreate
from app.models.time_off import TimeOff
from app.scheduling.conflicts import classify_block_conflicts
from app.scheduling.overlap import ConflictReport, Interval
from app.scheduling.recurrence import Occurrence, day_window, expand_blocks, get_timezone
from app.scheduling.slots import get_available_time_slots
from app.services.time_block_service import list_blocks


def _naive(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None)


async def list_active_appointments(
    session: AsyncSession,
    therapist_id: int,
    start_inclusive: datetime | None = None,
    end_exclusive: datetime | None = None,
) -> list[Appointment]:
    """Appointments that hold time, optionally limited to those intersecting [start, end) (naive UTC)."""
    q = select(Appointment).where(
        Appointment.therapist_id == therapist_id,
        Appointment.status.not_in(NON_BLOCKING_STATUSES),
    )
    if start_inclusive is not None:
        q = q.where(Appointment.end_time > start_inclusive)
    if end_exclusive is not None:
        q = q.where(Appointment.start_time < end_exclusive)
    result = await session.execute(q.order_by(Appointment.start_time))
    return list(result.scalars().all())


async def get_free_slots_for_date(session: AsyncSession, therapist_id: int, d: date) -> list[Interval]:
    """Open windows on `d` (a calendar day in settings.default_timezone)."""
    tz = get_timezone(settings.default_timezone)
    window = day_window(d, tz)
    availability = await list_blocks(session, Availability, therapist_id)
    time_off = await list_blocks(session, TimeOff, therapist_id)
    appointments = await list_active_appointments(
        session, therapist_id, _naive(window.start), _naive(window.end)
    )
    return get_available_time_slots(availability, time_off, appointments, d, tz)


async def get_calendar(
    session: AsyncSession, therapist_id: int, start_date: date, end_date: date
) -> dict[str, dict[str, list[Occurrence]]]:
    """
    Projected availability and time-off per day for a calendar view.

    Returns:
        {"2026-01-15": {"availability": [Occurrence, ...], "time_off": [...]}, ...}
        Days without entries are omitted. Occurrences are keyed by the local day they start on.
    """
    tz = get_timezone(settings.default_timezone)
    availability = await list_blocks(session, Availability, therapist_id)
    time_off = await list_blocks(session, TimeOff, therapist_id)

    result: dict[str, dict[str, list[Occurrence]]] = {}
    for kind, blocks in (("availability", availability), ("time_off", time_off)):
        for occurrence in expand_blocks(blocks, start_date, end_date, tz):
            local_day = occurrence.start.astimezone(tz).date()
            if local_day < start_date or local_day > end_date:
                continue
            day = result.setdefault(local_day.isoformat(), {"availability": [], "time_off": []})
            day[kind].append(occurrence)
    return dict(sorted(result.items()))


async def check_conflicts(
    session: AsyncSession,
    therapist_id: int,
    candidate: TimeBlockCreate,
    exclude_id: UUID | None = None,
) -> ConflictReport:
    """Classify a candidate block against the therapist's availability, time-off and appointments."""
    availability = await list_blocks(session, Availability, therapist_id)
    time_off = await list_blocks(session, TimeOff, therapist_id)
    appointments = await list_active_appointments(session, therapist_id)
    return classify_block_conflicts(
        candidate,
        availability,
        time_off,
        appointments,
        tz=settings.default_timezone,
        exclude_id=exclude_id,
    )


def fits_in_slots(start: datetime, end: datetime, slots: list[Interval]) -> bool:
    """True when [start, end) lies inside a single open window (aware datetimes)."""
    return any(slot.start <= start and end <= slot.end for slot in slots)


def days_between(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days + 1
