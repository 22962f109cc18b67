import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.availability import Availability
from app.core.timeutils import naive_utc, utc_naive_now
from app.models.time_block import TimeBlockCreate
from app.models.time_off import TimeOff
from app.scheduling.conflicts import recurring_overlap

logger = logging.getLogger(__name__)

# Availability and TimeOff share columns and lifecycle; every function here takes the model class
BlockModel = type[Availability] | type[TimeOff]


class BlockConflictError(Exception):
    """The block would overlap another block of the same kind owned by the same therapist."""


async def list_blocks(
    session: AsyncSession, model: BlockModel, therapist_id: int
) -> list[Availability | TimeOff]:
    result = await session.execute(
        select(model).where(model.therapist_id == therapist_id).order_by(model.start_time)
    )
    return list(result.scalars().all())


async def get_block(
    session: AsyncSession, model: BlockModel, block_id: UUID, therapist_id: int
) -> Availability | TimeOff | None:
    result = await session.execute(
        select(model).where(model.id == block_id, model.therapist_id == therapist_id)
    )
    return result.scalar_one_or_none()


async def _ensure_no_conflict(
    session: AsyncSession,
    model: BlockModel,
    therapist_id: int,
    data: TimeBlockCreate,
    exclude_id: UUID | None = None,
) -> None:
    existing = await list_blocks(session, model, therapist_id)
    if recurring_overlap(data, existing, settings.default_timezone, exclude_id=exclude_id):
        logger.info(
            "Rejected %s for therapist %s: overlaps an existing block",
            model.__tablename__, therapist_id,
        )
        raise BlockConflictError(f"This time conflicts with an existing {model.__tablename__.replace('_', '-')} entry")


def _column_values(data: TimeBlockCreate) -> dict:
    values = data.model_dump()
    values["start_time"] = naive_utc(data.start_time)
    values["end_time"] = naive_utc(data.end_time)
    return values


async def create_block(
    session: AsyncSession, model: BlockModel, therapist_id: int, data: TimeBlockCreate
) -> Availability | TimeOff:
    await _ensure_no_conflict(session, model, therapist_id, data)
    block = model(therapist_id=therapist_id, **_column_values(data))
    session.add(block)
    await session.flush()
    await session.refresh(block)
    logger.info("Created %s %s for therapist %s", model.__tablename__, block.id, therapist_id)
    return block


async def update_block(
    session: AsyncSession,
    model: BlockModel,
    block_id: UUID,
    therapist_id: int,
    data: TimeBlockCreate,
) -> Availability | TimeOff | None:
    """Returns None when the block does not exist or belongs to someone else."""
    block = await get_block(session, model, block_id, therapist_id)
    if not block:
        return None
    await _ensure_no_conflict(session, model, therapist_id, data, exclude_id=block_id)
    for field, value in _column_values(data).items():
        setattr(block, field, value)
    block.updated_at = utc_naive_now()
    session.add(block)
    await session.flush()
    await session.refresh(block)
    logger.info("Updated %s %s", model.__tablename__, block.id)
    return block


async def delete_block(
    session: AsyncSession, model: BlockModel, block_id: UUID, therapist_id: int
) -> bool:
    block = await get_block(session, model, block_id, therapist_id)
    if not block:
        return False
    await session.delete(block)
    await session.flush()
    logger.info("Deleted %s %s", model.__tablename__, block_id)
    return True
