from app.models.user import User, UserCreate, UserPublic
from app.models.refresh_token import RefreshToken
from app.models.availability import Availability, AvailabilityCreate, AvailabilityPublic
from app.models.time_off import TimeOff, TimeOffCreate, TimeOffPublic
from app.models.appointment import Appointment, AppointmentCreate, AppointmentPublic

__all__ = [
    "User",
    "UserCreate",
    "UserPublic",
    "RefreshToken",
    "Availability",
    "AvailabilityCreate",
    "AvailabilityPublic",
    "TimeOff",
    "TimeOffCreate",
    "TimeOffPublic",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
]
