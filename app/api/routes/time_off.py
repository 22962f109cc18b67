from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.db import get_session
from app.models.time_off import TimeOff, TimeOffCreate, TimeOffPublic
from app.models.user import User
from app.services.time_block_service import (
    BlockConflictError,
    create_block,
    delete_block,
    get_block,
    list_blocks,
    update_block,
)

router = APIRouter(prefix="/time-off", tags=["time-off"])

_NOT_FOUND = "Time-off entry not found or not yours"


@router.get("", response_model=list[TimeOffPublic])
async def list_my_time_off(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> list[TimeOff]:
    return await list_blocks(session, TimeOff, current_user.id)


@router.post("", response_model=TimeOffPublic, status_code=status.HTTP_201_CREATED)
async def add_time_off(
    body: TimeOffCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> TimeOff:
    try:
        return await create_block(session, TimeOff, current_user.id, body)
    except BlockConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e


@router.get("/{time_off_id}", response_model=TimeOffPublic)
async def get_time_off(
    time_off_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> TimeOff:
    block = await get_block(session, TimeOff, time_off_id, current_user.id)
    if not block:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return block


@router.put("/{time_off_id}", response_model=TimeOffPublic)
async def edit_time_off(
    time_off_id: UUID,
    body: TimeOffCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> TimeOff:
    try:
        block = await update_block(session, TimeOff, time_off_id, current_user.id, body)
    except BlockConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if not block:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
    return block


@router.delete("/{time_off_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_time_off(
    time_off_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> None:
    if not await delete_block(session, TimeOff, time_off_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=_NOT_FOUND)
