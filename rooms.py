import logging
from typing import Iterable, List, Optional

from sqlmodel import select, col
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clock import SystemClock
from errors import NotFound, RoomNameTaken
from locks import RoomLocks
from models import Room
from schemas import RoomCreate, RoomUpdate

logger = logging.getLogger(__name__)


class RoomDirectory:
    """Room inventory: lookups for allocation plus the admin mutations."""

    def __init__(self, session: AsyncSession, locks: Optional[RoomLocks] = None, clock=None) -> None:
        self.session = session
        self.locks = locks or RoomLocks()
        self.clock = clock or SystemClock()

    async def get(self, room_id: int) -> Optional[Room]:
        return await self.session.get(Room, room_id)

    async def find_by_id(self, room_id: int) -> Room:
        room = await self.get(room_id)
        if room is None:
            raise NotFound("Room not found")
        return room

    async def find_active_rooms_with_capacity_at_least(self, capacity: int) -> List[Room]:
        # Ordered by name so auto-assignment is reproducible
        statement = (
            select(Room)
            .where(Room.is_active == True)  # noqa: E712
            .where(Room.capacity >= capacity)
            .order_by(Room.name, Room.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list_rooms(
        self,
        min_capacity: Optional[int] = None,
        amenities: Optional[Iterable[str]] = None,
        location: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[Room]:
        statement = select(Room)
        if min_capacity is not None:
            statement = statement.where(Room.capacity >= min_capacity)
        if location:
            statement = statement.where(col(Room.location).ilike(f"%{location}%"))
        if is_active is not None:
            statement = statement.where(Room.is_active == is_active)
        result = await self.session.execute(statement.order_by(Room.name))
        rooms = result.scalars().all()

        # JSON columns don't support containment portably, so filter here
        if amenities:
            wanted = {a.strip() for a in amenities if a.strip()}
            rooms = [room for room in rooms if room.has_amenities(wanted)]
        return list(rooms)

    async def create(self, data: RoomCreate) -> Room:
        existing = await self.session.execute(select(Room.id).where(Room.name == data.name))
        if existing.first() is not None:
            raise RoomNameTaken()

        now = self.clock.now()
        room = Room(**data.model_dump(), created_at=now, updated_at=now)
        try:
            self.session.add(room)
            await self.session.commit()
        except IntegrityError:
            # Lost a race with another create using the same name
            await self.session.rollback()
            raise RoomNameTaken()
        await self.session.refresh(room)
        logger.info("Room %s created: %r (capacity %d)", room.id, room.name, room.capacity)
        return room

    async def update(self, room_id: int, data: RoomUpdate) -> Room:
        changes = data.model_dump(exclude_unset=True)
        async with self.locks.hold(room_id):
            room = await self.find_by_id(room_id)
            if "name" in changes and changes["name"] != room.name:
                clash = await self.session.execute(
                    select(Room.id).where(Room.name == changes["name"], Room.id != room_id)
                )
                if clash.first() is not None:
                    raise RoomNameTaken()

            for field, value in changes.items():
                setattr(room, field, value)
            room.updated_at = self.clock.now()
            try:
                await self.session.commit()
            except IntegrityError:
                await self.session.rollback()
                if "name" in changes:
                    raise RoomNameTaken()
                raise
        await self.session.refresh(room)
        logger.info("Room %s updated: %s", room_id, ", ".join(sorted(changes)) or "no changes")
        return room

    async def deactivate(self, room_id: int) -> Room:
        """Soft delete: the room stays on record but is never allocated again."""
        async with self.locks.hold(room_id):
            room = await self.session.get(Room, room_id, populate_existing=True, with_for_update=True)
            if room is None:
                raise NotFound("Room not found")
            room.is_active = False
            room.updated_at = self.clock.now()
            await self.session.commit()
        logger.info("Room %s deactivated", room_id)
        return room
