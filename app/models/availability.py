from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from app.core.timeutils import utc_naive_now
from app.models.time_block import TimeBlockBase, TimeBlockCreate, TimeBlockPublic


class Availability(TimeBlockBase, table=True):
    __tablename__ = "availability"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    therapist_id: int = Field(foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class AvailabilityCreate(TimeBlockCreate):
    pass


class AvailabilityPublic(TimeBlockPublic):
    pass
