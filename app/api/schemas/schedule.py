from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from app.models.time_block import TimeBlockCreate


class SlotInfo(BaseModel):
    start: datetime
    end: datetime


class FreeSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    timezone: str
    slots: list[SlotInfo]


class OccurrenceInfo(BaseModel):
    block_id: UUID | None = None
    start: datetime
    end: datetime


class CalendarDay(BaseModel):
    date: str  # YYYY-MM-DD
    availability: list[OccurrenceInfo]
    time_off: list[OccurrenceInfo]


class CalendarResponse(BaseModel):
    start_date: date
    end_date: date
    timezone: str
    days: list[CalendarDay]


class ConflictCheckRequest(TimeBlockCreate):
    # Id of the block being edited, so it is not compared with itself
    exclude_id: UUID | None = None


class ConflictCheckResponse(BaseModel):
    availability: bool
    time_off: bool
    appointments: bool
    any: bool
