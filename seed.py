"""Recreate the tables and load a demo room inventory.

    python seed.py
"""

import asyncio
import logging

from database import async_session, drop_db, engine, init_db
from rooms import RoomDirectory
from schemas import RoomCreate

logger = logging.getLogger(__name__)

DEMO_ROOMS = [
    RoomCreate(
        name="Conference Room A",
        capacity=20,
        amenities=["Projector", "Whiteboard", "Video Conference", "WiFi"],
        location="Building 1, Floor 2",
        description="Large conference room with modern AV equipment",
    ),
    RoomCreate(
        name="Conference Room B",
        capacity=12,
        amenities=["TV Screen", "Whiteboard", "WiFi"],
        location="Building 1, Floor 2",
        description="Medium-sized room for team meetings",
    ),
    RoomCreate(
        name="Huddle Space 1",
        capacity=4,
        amenities=["TV Screen", "WiFi"],
        location="Building 1, Floor 3",
        description="Small room for quick syncs",
    ),
    RoomCreate(
        name="Board Room",
        capacity=30,
        amenities=["Projector", "Video Conference", "Sound System", "WiFi"],
        location="Building 2, Floor 5",
        description="Executive board room",
    ),
    RoomCreate(
        name="Training Room",
        capacity=50,
        amenities=["Projector", "Whiteboard", "Sound System", "WiFi"],
        location="Building 2, Floor 1",
    ),
]


async def seed():
    await drop_db()
    await init_db()
    async with async_session() as session:
        directory = RoomDirectory(session)
        for data in DEMO_ROOMS:
            await directory.create(data)
    logger.info("Seeded %d rooms", len(DEMO_ROOMS))
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(seed())
