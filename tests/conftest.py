import os

# Must be set before config.py is imported by anything under test
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from auth import Role, UserIdentity
from bookings import BookingService
from clock import FixedClock
from database import init_db, make_session_factory
from locks import RoomLocks
from rooms import RoomDirectory
from schemas import RoomCreate
from tests.helpers import NOW


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def locks():
    return RoomLocks()


@pytest.fixture
async def rooms(session, locks, clock):
    """Three active rooms; directory order is Alpha, Beta, Gamma."""
    directory = RoomDirectory(session, locks, clock=clock)
    created = {}
    for name, capacity, amenities in [
        ("Gamma", 20, ["Projector", "WiFi"]),
        ("Alpha", 10, ["Whiteboard", "WiFi"]),
        ("Beta", 6, ["TV Screen"]),
    ]:
        room = await directory.create(
            RoomCreate(name=name, capacity=capacity, amenities=amenities, location="Building 1, Floor 2")
        )
        created[name] = room
    return created


@pytest.fixture
def service(session, clock, locks):
    return BookingService(session, clock=clock, locks=locks)


@pytest.fixture
def alice():
    return UserIdentity(id="alice")


@pytest.fixture
def bob():
    return UserIdentity(id="bob")


@pytest.fixture
def admin():
    return UserIdentity(id="root", role=Role.ADMIN)
