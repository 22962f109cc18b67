from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.db import get_session
from app.models.appointment import Appointment, AppointmentCreate, AppointmentPublic
from app.models.user import User
from app.services.appointment_service import (
    cancel_appointment,
    create_appointment,
    delete_appointment,
    list_appointments_for_therapist,
)

router = APIRouter(prefix="/appointments", tags=["appointments"])

_NOT_FOUND = "Appointment not found or not yours"


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Appointment:
    appointment = await create_appointment(session, current_user.id, body)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Time not available: outside availability, during time off, or overlapping another appointment.",
        )
    return appointment


@router.get("", response_model=list[AppointmentPublic])
async def list_my_appointments(
    from_date: date | None = Query(None, alias="from_date"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[Appointment]:
    return await list_appointments_for_therapist(session, current_user.id, from_date=from_date)


@router.post("/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel_my_appointment(
    appointment_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Appointment:
    appointment = await cancel_appointment(session, appointment_id, current_user.id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return appointment


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_appointment(
    appointment_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> None:
    if not await delete_appointment(session, appointment_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
