import logging
from typing import Optional

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from intervals import Interval
from models import Booking, BookingStatus

logger = logging.getLogger(__name__)


def overlapping_bookings(room_id: int, interval: Interval, exclude_booking_id: Optional[int] = None):
    """Statement selecting live bookings on ``room_id`` that overlap ``interval``.

    Same predicate as ``intervals.overlaps``, pushed down into SQL.
    """
    statement = select(Booking).where(
        Booking.room_id == room_id,
        Booking.status != BookingStatus.CANCELLED,
        Booking.start_time < interval.end,
        Booking.end_time > interval.start,
    )
    if exclude_booking_id is not None:
        statement = statement.where(Booking.id != exclude_booking_id)
    return statement


async def has_conflict(
    session: AsyncSession,
    room_id: int,
    interval: Interval,
    exclude_booking_id: Optional[int] = None,
) -> bool:
    """True if any non-cancelled booking on the room overlaps ``interval``.

    Callers that act on a False result must hold the room's lock from
    ``locks.RoomLocks`` until they commit.
    """
    statement = overlapping_bookings(room_id, interval, exclude_booking_id).limit(1)
    result = await session.execute(statement)
    clash = result.scalars().first()
    if clash is not None:
        logger.debug(
            "Room %s: %s-%s overlaps booking %s (%s-%s)",
            room_id, interval.start, interval.end, clash.id, clash.start_time, clash.end_time,
        )
    return clash is not None
