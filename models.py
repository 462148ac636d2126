from enum import Enum
from typing import List, Optional
from datetime import date, datetime

from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, Index

from intervals import Interval


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    # Set by an external batch process, never by the booking service itself
    COMPLETED = "completed"


class Room(SQLModel, table=True):
    __tablename__ = "rooms"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, unique=True, index=True)
    capacity: int = Field(index=True)
    amenities: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    location: str = Field(max_length=200)
    # Soft delete: inactive rooms are kept so historical bookings still resolve
    is_active: bool = Field(default=True, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def has_amenities(self, wanted) -> bool:
        return set(wanted) <= set(self.amenities or [])


class Booking(SQLModel, table=True):
    __tablename__ = "bookings"
    __table_args__ = (
        # Conflict scans always filter by room and time
        Index("ix_bookings_room_window", "room_id", "start_time", "end_time"),
        Index("ix_bookings_user_date", "user_id", "booking_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    room_id: int = Field(foreign_key="rooms.id", index=True)
    user_id: str = Field(max_length=64)
    booking_date: date = Field(index=True)
    start_time: datetime
    end_time: datetime
    purpose: str = Field(max_length=500)
    status: BookingStatus = Field(default=BookingStatus.CONFIRMED, index=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED
