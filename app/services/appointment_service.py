import logging
from datetime import date, datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.timeutils import naive_utc, utc_naive_now
from app.models.appointment import STATUS_CANCELLED, Appointment, AppointmentCreate
from app.scheduling.overlap import parse_instant
from app.scheduling.recurrence import get_timezone
from app.services.slot_service import fits_in_slots, get_free_slots_for_date

logger = logging.getLogger(__name__)


async def create_appointment(
    session: AsyncSession, therapist_id: int, data: AppointmentCreate
) -> Appointment | None:
    """
    Book an appointment. It must sit inside one open window of the day it starts on
    (availability minus time-off and other appointments); otherwise returns None.
    """
    start = parse_instant(data.start_time)
    end = parse_instant(data.end_time)
    d = start.astimezone(get_timezone(settings.default_timezone)).date()
    slots = await get_free_slots_for_date(session, therapist_id, d)
    if not fits_in_slots(start, end, slots):
        logger.info("Rejected appointment for therapist %s: %s-%s is not free", therapist_id, start, end)
        return None
    appointment = Appointment(
        therapist_id=therapist_id,
        client_name=data.client_name,
        start_time=naive_utc(start),
        end_time=naive_utc(end),
        notes=data.notes,
    )
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Created appointment %s for therapist %s", appointment.id, therapist_id)
    return appointment


async def list_appointments_for_therapist(
    session: AsyncSession, therapist_id: int, from_date: date | None = None
) -> list[Appointment]:
    q = select(Appointment).where(Appointment.therapist_id == therapist_id).order_by(Appointment.start_time)
    if from_date:
        start = datetime(from_date.year, from_date.month, from_date.day, 0, 0, 0)
        q = q.where(Appointment.start_time >= start)
    result = await session.execute(q)
    return list(result.scalars().all())


async def _get_appointment(session: AsyncSession, appointment_id: UUID, therapist_id: int) -> Appointment | None:
    result = await session.execute(
        select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.therapist_id == therapist_id,
        )
    )
    return result.scalar_one_or_none()


async def cancel_appointment(session: AsyncSession, appointment_id: UUID, therapist_id: int) -> Appointment | None:
    """Mark as cancelled; the time becomes free again. Returns None if not found or not yours."""
    appointment = await _get_appointment(session, appointment_id, therapist_id)
    if not appointment:
        return None
    appointment.status = STATUS_CANCELLED
    appointment.updated_at = utc_naive_now()
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Cancelled appointment %s", appointment_id)
    return appointment


async def delete_appointment(session: AsyncSession, appointment_id: UUID, therapist_id: int) -> bool:
    appointment = await _get_appointment(session, appointment_id, therapist_id)
    if not appointment:
        return False
    await session.delete(appointment)
    await session.flush()
    return True
