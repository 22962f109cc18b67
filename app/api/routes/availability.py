from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.db import get_session
from app.models.availability import Availability, AvailabilityCreate, AvailabilityPublic
from app.models.user import User
from app.services.time_block_service import (
    BlockConflictError,
    create_block,
    delete_block,
    get_block,
    list_blocks,
    update_block,
)

router = APIRouter(prefix="/availability", tags=["availability"])

_NOT_FOUND = "Availability not found or not yours"


@router.get("", response_model=list[AvailabilityPublic])
async def list_my_availability(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[Availability]:
    return await list_blocks(session, Availability, current_user.id)


@router.post("", response_model=AvailabilityPublic, status_code=status.HTTP_201_CREATED)
async def add_availability(
    body: AvailabilityCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Availability:
    try:
        return await create_block(session, Availability, current_user.id, body)
    except BlockConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.get("/{availability_id}", response_model=AvailabilityPublic)
async def get_availability(
    availability_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Availability:
    block = await get_block(session, Availability, availability_id, current_user.id)
    if not block:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return block


@router.put("/{availability_id}", response_model=AvailabilityPublic)
async def edit_availability(
    availability_id: UUID,
    body: AvailabilityCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Availability:
    try:
        block = await update_block(session, Availability, availability_id, current_user.id, body)
    except BlockConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if not block:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return block


@router.delete("/{availability_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_availability(
    availability_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> None:
    if not await delete_block(session, Availability, availability_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
