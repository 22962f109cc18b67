from datetime import datetime
from uuid import UUID, uuid4

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from app.core.timeutils import utc_naive_now
from app.scheduling.overlap import validate_interval

STATUS_SCHEDULED = "scheduled"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
# Statuses that no longer hold the therapist's time
NON_BLOCKING_STATUSES = (STATUS_CANCELLED,)


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    therapist_id: int = Field(foreign_key="users.id", index=True)
    client_name: str | None = None
    start_time: datetime = Field(index=True)
    end_time: datetime
    status: str = Field(default=STATUS_SCHEDULED, index=True)
    notes: str | None = None
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class AppointmentCreate(SQLModel):
    start_time: datetime
    end_time: datetime
    client_name: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "AppointmentCreate":
        validate_interval(self.start_time, self.end_time)
        return self


class AppointmentPublic(SQLModel):
    id: UUID
    therapist_id: int
    client_name: str | None = None
    start_time: datetime
    end_time: datetime
    status: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
