from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from models import BookingStatus


def _clean_amenities(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    # Amenities are a set: order and duplicates carry no meaning
    return sorted({a.strip() for a in value if a and a.strip()})


def _clean_purpose(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Purpose is required")
    return value


# Rooms

class RoomCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=1000)
    amenities: List[str] = Field(default_factory=list)
    location: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name", "location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("amenities")
    @classmethod
    def normalize_amenities(cls, v: List[str]) -> List[str]:
        return _clean_amenities(v)


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    capacity: Optional[int] = Field(default=None, ge=1, le=1000)
    amenities: Optional[List[str]] = None
    location: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None

    # Omitted fields stay as they are; an explicit null is not a value
    @field_validator("name", "capacity", "amenities", "location", "is_active", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("amenities")
    @classmethod
    def normalize_amenities(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_amenities(v)


class RoomRead(BaseModel):
    id: int
    name: str
    capacity: int
    amenities: List[str]
    location: str
    is_active: bool
    description: Optional[str] = None

    model_config = {"from_attributes": True}


# Bookings

class BookingCreate(BaseModel):
    booking_date: date
    start_time: time
    end_time: time
    purpose: str = Field(min_length=1, max_length=500)
    preferred_room_id: Optional[int] = None

    @field_validator("purpose")
    @classmethod
    def strip_purpose(cls, v: str) -> str:
        return _clean_purpose(v)


class BookingPatch(BaseModel):
    booking_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    purpose: Optional[str] = Field(default=None, min_length=1, max_length=500)

    @field_validator("purpose")
    @classmethod
    def strip_purpose(cls, v: Optional[str]) -> Optional[str]:
        return _clean_purpose(v)


class BookingRead(BaseModel):
    id: int
    room_id: int
    user_id: str
    booking_date: date
    start_time: datetime
    end_time: datetime
    purpose: str
    status: BookingStatus

    model_config = {"from_attributes": True}


class BookingCreated(BaseModel):
    booking: BookingRead
    room: RoomRead
    was_preferred_room: bool


class BookingWindow(str, Enum):
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"
