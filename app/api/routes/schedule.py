from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.api.schemas.schedule import (
    CalendarDay,
    CalendarResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
    FreeSlotsResponse,
    OccurrenceInfo,
    SlotInfo,
)
from app.core.config import settings
from app.core.db import get_session
from app.models.user import User
from app.services.slot_service import check_conflicts, days_between, get_calendar, get_free_slots_for_date

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("/free-slots", response_model=FreeSlotsResponse)
async def free_slots(
    date_param: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> FreeSlotsResponse:
    """Open windows for the given day: availability minus time-off and appointments."""
    slots = await get_free_slots_for_date(session, current_user.id, date_param)
    return FreeSlotsResponse(
        date=date_param.isoformat(),
        timezone=settings.default_timezone,
        slots=[SlotInfo(start=s.start, end=s.end) for s in slots],
    )


@router.get("/calendar", response_model=CalendarResponse)
async def calendar(
    start: date = Query(...),
    end: date = Query(...),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CalendarResponse:
    """Availability and time-off occurrences per day, with recurrence expanded."""
    if end < start:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end must not be before start")
    if days_between(start, end) > settings.max_range_days:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Range too long (max {settings.max_range_days} days)",
        )
    by_day = await get_calendar(session, current_user.id, start, end)
    return CalendarResponse(
        start_date=start,
        end_date=end,
        timezone=settings.default_timezone,
        days=[
            CalendarDay(
                date=day,
                availability=[OccurrenceInfo(block_id=o.id, start=o.start, end=o.end) for o in entries["availability"]],
                time_off=[OccurrenceInfo(block_id=o.id, start=o.start, end=o.end) for o in entries["time_off"]],
            )
            for day, entries in by_day.items()
        ],
    )


@router.post("/conflicts", response_model=ConflictCheckResponse)
async def conflicts(
    body: ConflictCheckRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ConflictCheckResponse:
    """
    Report which collections a candidate block overlaps. Whether a given kind of
    conflict blocks the write or only warns is up to the client.
    """
    report = await check_conflicts(session, current_user.id, body, exclude_id=body.exclude_id)
    return ConflictCheckResponse(
        availability=report.availability,
        time_off=report.time_off,
        appointments=report.appointments,
        any=report.any,
    )
