from datetime import datetime
from uuid import UUID

from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel

from app.scheduling.overlap import validate_interval
from app.scheduling.recurrence import format_recurrence, parse_recurrence


class TimeBlockBase(SQLModel):
    """Columns shared by availability and time-off rows."""

    start_time: datetime = Field(index=True)
    end_time: datetime
    recurrence: str = "none"


class TimeBlockPublic(SQLModel):
    id: UUID
    therapist_id: int
    start_time: datetime
    end_time: datetime
    recurrence: str
    created_at: datetime
    updated_at: datetime


class TimeBlockCreate(TimeBlockBase):
    """
    Incoming block: end must be after start and the recurrence tag must parse.

    The tag is stored in canonical form ("weekly" becomes "weekly:0,1,2,3,4,5,6").
    """

    @field_validator("recurrence", mode="before")
    @classmethod
    def _canonical_recurrence(cls, value: str | None) -> str:
        return format_recurrence(parse_recurrence(value))

    @model_validator(mode="after")
    def _end_after_start(self) -> "TimeBlockCreate":
        validate_interval(self.start_time, self.end_time)
        return self
