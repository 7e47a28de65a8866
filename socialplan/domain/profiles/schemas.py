"""Profile domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...models import WEEKDAYS
from ...shared.validators import validate_time, validate_time_range, validate_weekday


class AvailabilitySlot(BaseModel):
    """One weekday's configured window"""

    day: str
    start_time: str
    end_time: str
    is_available: bool

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: str) -> str:
        return validate_weekday(v)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: str) -> str:
        return validate_time(v)

    @model_validator(mode="after")
    def check_window(self):
        if self.is_available:
            validate_time_range(self.start_time, self.end_time)
        return self


def normalize_availability(slots: list[AvailabilitySlot]) -> list[AvailabilitySlot]:
    """Require exactly one slot per weekday and return them in weekday order"""
    by_day = {}
    for slot in slots:
        if slot.day in by_day:
            raise ValueError(f"Duplicate availability for {slot.day}")
        by_day[slot.day] = slot
    missing = [day for day in WEEKDAYS if day not in by_day]
    if missing:
        raise ValueError(f"Missing availability for {', '.join(missing)}")
    return [by_day[day] for day in WEEKDAYS]


class ProfileUpdate(BaseModel):
    """Client-writable profile fields; identity, email and the social graph are not"""

    model_config = ConfigDict(extra="forbid")

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    photo_url: Optional[str] = Field(None, max_length=500)
    availability: Optional[list[AvailabilitySlot]] = None

    @field_validator("availability")
    @classmethod
    def validate_week(cls, v):
        if v is None:
            return v
        return normalize_availability(v)


class BioUpdate(BaseModel):
    bio: str = Field(..., max_length=500)


class AvailabilityUpdate(BaseModel):
    availability: list[AvailabilitySlot]

    @field_validator("availability")
    @classmethod
    def validate_week(cls, v):
        return normalize_availability(v)


class PublicProfileResponse(BaseModel):
    """What other users may see"""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    display_name: str
    email: str
    bio: str = ""
    photo_url: Optional[str] = None
    availability: list[AvailabilitySlot]
    following: list[str] = []
    followers: list[str] = []


class ProfileResponse(PublicProfileResponse):
    """The owner's own view"""

    email_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FreeTimeSlot(BaseModel):
    day: str
    start_time: str
    end_time: str


class FreeTimeResponse(BaseModel):
    uid: str
    other_uid: str
    slots: list[FreeTimeSlot]
