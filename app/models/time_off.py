from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from app.core.timeutils import utc_naive_now
from app.models.time_block import TimeBlockBase, TimeBlockCreate, TimeBlockPublic


class TimeOff(TimeBlockBase, table=True):
    __tablename__ = "time_off"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    therapist_id: int = Field(foreign_key="users.id", index=True)
    reason: str | None = None
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class TimeOffCreate(TimeBlockCreate):
    reason: str | None = None


class TimeOffPublic(TimeBlockPublic):
    reason: str | None = None
