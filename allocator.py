"""Room allocation for a requested time slot.

The preferred room is tried first; failing that, active rooms with enough
capacity are tried in directory order and the first free one wins.

Claiming a room is delegated to a ``reserve`` callable. It receives a
candidate room and returns whatever it committed (usually the new
booking), or ``None`` when the room turned out to be taken. The booking
service passes a callable that checks for conflicts and commits under the
room's lock; tests can pass plain functions.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, Optional, Tuple, TypeVar, Union

from errors import RoomInactive, RoomNotFound
from models import Room

logger = logging.getLogger(__name__)

T = TypeVar("T")

Reserve = Callable[[Room], Awaitable[Optional[T]]]


@dataclass(frozen=True)
class Allocation(Generic[T]):
    room: Room
    claim: T
    was_preferred: bool
    preferred_unavailable: bool = False


@dataclass(frozen=True)
class Unavailable:
    preferred_requested: bool = False


async def first_fit(candidates: Iterable[Room], reserve: Reserve) -> Optional[Tuple[Room, T]]:
    """Return the first candidate ``reserve`` accepts, with its claim."""
    for room in candidates:
        claim = await reserve(room)
        if claim is not None:
            return room, claim
        logger.debug("Room %s (%s) is taken", room.id, room.name)
    return None


async def allocate(
    directory,
    reserve: Reserve,
    preferred_room_id: Optional[int] = None,
    min_capacity: int = 1,
) -> Union[Allocation, Unavailable]:
    """Assign a room, trying ``preferred_room_id`` before auto-assignment.

    ``directory`` needs ``get(room_id)`` and
    ``find_active_rooms_with_capacity_at_least(n)``; see ``rooms.RoomDirectory``.

    Raises RoomNotFound or RoomInactive when the preferred room can't be
    booked at all. A preferred room that is merely busy falls through to
    auto-assignment.
    """
    preferred_requested = preferred_room_id is not None

    if preferred_requested:
        preferred = await directory.get(preferred_room_id)
        if preferred is None:
            raise RoomNotFound()
        if not preferred.is_active:
            raise RoomInactive()

        claim = await reserve(preferred)
        if claim is not None:
            return Allocation(room=preferred, claim=claim, was_preferred=True)
        logger.info("Preferred room %s is busy, falling back to auto-assignment", preferred_room_id)

    candidates = [
        room
        for room in await directory.find_active_rooms_with_capacity_at_least(min_capacity)
        if room.id != preferred_room_id
    ]
    found = await first_fit(candidates, reserve)
    if found is None:
        return Unavailable(preferred_requested=preferred_requested)

    room, claim = found
    return Allocation(
        room=room,
        claim=claim,
        was_preferred=False,
        preferred_unavailable=preferred_requested,
    )
