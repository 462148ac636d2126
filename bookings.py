import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import List, Optional

from sqlmodel import col, select
from sqlalchemy.ext.asyncio import AsyncSession

from allocator import Unavailable, allocate
from auth import UserIdentity
from clock import SystemClock
from conflicts import has_conflict
from errors import (
    BookingError,
    BookingInPast,
    CannotModifyCancelled,
    NoRoomAvailable,
    NotAuthorized,
    NotFound,
    ScheduleConflict,
)
from intervals import Interval
from locks import RoomLocks
from models import Booking, BookingStatus, Room
from rooms import RoomDirectory
from schemas import BookingCreate, BookingPatch, BookingWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingOutcome:
    booking: Booking
    room: Room
    # True when no preference was given, as well as when it was honoured
    was_preferred_room: bool


class BookingService:
    """Create, reschedule and cancel bookings.

    Every check-then-commit on a room runs under ``RoomLocks.hold(room_id)``
    and re-reads the room row ``FOR UPDATE``, so overlapping requests for one
    room are serialized within the process and across database clients.
    Nothing is written unless the final commit happens.
    """

    def __init__(self, session: AsyncSession, clock=None, locks: Optional[RoomLocks] = None) -> None:
        self.session = session
        self.clock = clock or SystemClock()
        self.locks = locks or RoomLocks()
        self.rooms = RoomDirectory(session, self.locks, clock=self.clock)

    # Validation

    def _check_not_past(self, interval: Interval) -> None:
        if interval.start < self.clock.now():
            raise BookingInPast()

    @staticmethod
    def _check_can_modify(user: UserIdentity, booking: Booking) -> None:
        if booking.user_id != user.id and not user.is_admin:
            raise NotAuthorized()

    async def _get(self, booking_id: int, for_update: bool = False) -> Booking:
        if for_update:
            booking = await self.session.get(Booking, booking_id, populate_existing=True, with_for_update=True)
        else:
            booking = await self.session.get(Booking, booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    async def _lock_room_row(self, room_id: int) -> Optional[Room]:
        return await self.session.get(Room, room_id, populate_existing=True, with_for_update=True)

    async def _release(self) -> None:
        # Nothing is pending here; ending the transaction drops the row locks.
        # Commit rather than rollback so loaded instances are not expired.
        await self.session.commit()

    # Commands

    async def create_booking(self, user: UserIdentity, request: BookingCreate) -> BookingOutcome:
        # Raises InvalidInterval first, then the past check
        interval = Interval.on_day(request.booking_date, request.start_time, request.end_time)
        self._check_not_past(interval)

        async def reserve(room: Room) -> Optional[Booking]:
            async with self.locks.hold(room.id):
                current = await self._lock_room_row(room.id)
                if current is None or not current.is_active or await has_conflict(self.session, room.id, interval):
                    await self._release()
                    return None
                now = self.clock.now()
                booking = Booking(
                    room_id=room.id,
                    user_id=user.id,
                    booking_date=request.booking_date,
                    start_time=interval.start,
                    end_time=interval.end,
                    purpose=request.purpose,
                    status=BookingStatus.CONFIRMED,
                    created_at=now,
                    updated_at=now,
                )
                self.session.add(booking)
                await self.session.commit()
            await self.session.refresh(booking)
            return booking

        result = await allocate(self.rooms, reserve, preferred_room_id=request.preferred_room_id)
        if isinstance(result, Unavailable):
            logger.warning(
                "No room available for %s %s-%s (preferred room %s)",
                request.booking_date, request.start_time, request.end_time, request.preferred_room_id,
            )
            raise NoRoomAvailable(preferred_room_unavailable=result.preferred_requested)

        booking = result.claim
        logger.info(
            "Booking %s created by %s in room %s for %s-%s%s",
            booking.id, user.id, result.room.id, booking.start_time, booking.end_time,
            " (preferred room unavailable)" if result.preferred_unavailable else "",
        )
        was_preferred = result.was_preferred or request.preferred_room_id is None
        return BookingOutcome(booking=booking, room=result.room, was_preferred_room=was_preferred)

    async def reschedule_booking(self, user: UserIdentity, booking_id: int, patch: BookingPatch) -> Booking:
        booking = await self._get(booking_id)
        self._check_can_modify(user, booking)
        if booking.is_cancelled:
            raise CannotModifyCancelled()

        day = patch.booking_date or booking.booking_date
        start: time = patch.start_time or booking.start_time.time()
        end: time = patch.end_time or booking.end_time.time()
        interval = Interval.on_day(day, start, end)
        self._check_not_past(interval)

        # The room never changes on reschedule
        async with self.locks.hold(booking.room_id):
            await self._lock_room_row(booking.room_id)
            # A cancel may have committed since the first read
            booking = await self._get(booking_id, for_update=True)
            try:
                self._check_can_modify(user, booking)
                if booking.is_cancelled:
                    raise CannotModifyCancelled()
                if await has_conflict(self.session, booking.room_id, interval, exclude_booking_id=booking.id):
                    logger.warning(
                        "Reschedule of booking %s to %s-%s conflicts in room %s",
                        booking.id, interval.start, interval.end, booking.room_id,
                    )
                    raise ScheduleConflict()
            except BookingError:
                await self._release()
                raise

            booking.booking_date = day
            booking.start_time = interval.start
            booking.end_time = interval.end
            if patch.purpose is not None:
                booking.purpose = patch.purpose
            booking.updated_at = self.clock.now()
            await self.session.commit()

        await self.session.refresh(booking)
        logger.info("Booking %s rescheduled by %s to %s-%s", booking.id, user.id, booking.start_time, booking.end_time)
        return booking

    async def cancel_booking(self, user: UserIdentity, booking_id: int) -> Booking:
        booking = await self._get(booking_id, for_update=True)
        self._check_can_modify(user, booking)

        # No "already cancelled" error: cancelling is always allowed once authorized
        booking.status = BookingStatus.CANCELLED
        booking.updated_at = self.clock.now()
        await self.session.commit()
        await self.session.refresh(booking)
        logger.info("Booking %s cancelled by %s", booking.id, user.id)
        return booking

    # Queries

    async def get_booking(self, user: UserIdentity, booking_id: int) -> Booking:
        booking = await self._get(booking_id)
        self._check_can_modify(user, booking)
        return booking

    async def list_my_bookings(self, user: UserIdentity, window: BookingWindow = BookingWindow.ALL) -> List[Booking]:
        statement = select(Booking).where(
            Booking.user_id == user.id,
            Booking.status != BookingStatus.CANCELLED,
        )
        now = self.clock.now()
        if window == BookingWindow.UPCOMING:
            statement = statement.where(Booking.start_time >= now)
        elif window == BookingWindow.PAST:
            statement = statement.where(Booking.end_time < now)

        result = await self.session.execute(statement.order_by(col(Booking.start_time).desc()))
        return list(result.scalars().all())

    async def list_all_bookings(
        self,
        user: UserIdentity,
        status: Optional[BookingStatus] = None,
        room_id: Optional[int] = None,
        date_from=None,
        date_to=None,
    ) -> List[Booking]:
        """Bookings across all users, filtered.

        Admins may list everything. Other users must narrow the listing to a
        room or a start date.
        """
        if not user.is_admin and room_id is None and date_from is None:
            raise NotAuthorized("Use /api/bookings/my to get your bookings")

        statement = select(Booking)
        if room_id is not None:
            statement = statement.where(Booking.room_id == room_id)
        if date_from is not None:
            statement = statement.where(Booking.start_time >= datetime.combine(date_from, time.min))
        if date_to is not None:
            # Inclusive of the whole last day
            statement = statement.where(Booking.start_time < datetime.combine(date_to, time.min) + timedelta(days=1))
        if status is not None:
            statement = statement.where(Booking.status == status)
        else:
            statement = statement.where(Booking.status != BookingStatus.CANCELLED)

        result = await self.session.execute(statement.order_by(Booking.start_time))
        return list(result.scalars().all())
