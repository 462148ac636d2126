import logging
from datetime import date
from typing import List, Optional

from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth import UserIdentity, current_user, require_admin
from bookings import BookingService
from clock import SystemClock
from config import CORS_ORIGINS, LOG_LEVEL
from database import init_db, get_session
from errors import BookingError
from locks import RoomLocks
from models import BookingStatus
from rooms import RoomDirectory
from schemas import (
    BookingCreate,
    BookingCreated,
    BookingPatch,
    BookingRead,
    BookingWindow,
    RoomCreate,
    RoomRead,
    RoomUpdate,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Meeting Room Booking System")

# Shared by every request in this process
app.state.clock = SystemClock()
app.state.room_locks = RoomLocks()


@app.on_event("startup")
async def on_startup():
    await init_db()


# --- Error translation ---

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    # Infrastructure failure, not a booking outcome: nothing was committed, retry is safe
    logger.exception("Storage failure during %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"success": False, "message": "Storage temporarily unavailable", "retryable": True},
    )


# --- Dependencies ---

def get_room_directory(request: Request, session: AsyncSession = Depends(get_session)) -> RoomDirectory:
    return RoomDirectory(session, request.app.state.room_locks, clock=request.app.state.clock)


def get_booking_service(request: Request, session: AsyncSession = Depends(get_session)) -> BookingService:
    return BookingService(session, clock=request.app.state.clock, locks=request.app.state.room_locks)


# --- Rooms ---

@app.get("/api/rooms", response_model=List[RoomRead])
async def list_rooms(
    capacity: Optional[int] = Query(default=None, ge=1),
    amenities: Optional[str] = Query(default=None, description="Comma-separated, all must match"),
    location: Optional[str] = None,
    is_active: Optional[bool] = None,
    rooms: RoomDirectory = Depends(get_room_directory),
):
    wanted = amenities.split(",") if amenities else None
    return await rooms.list_rooms(
        min_capacity=capacity, amenities=wanted, location=location, is_active=is_active
    )


@app.get("/api/rooms/{room_id}", response_model=RoomRead)
async def get_room(room_id: int, rooms: RoomDirectory = Depends(get_room_directory)):
    return await rooms.find_by_id(room_id)


@app.post("/api/rooms", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_data: RoomCreate,
    user: UserIdentity = Depends(current_user),
    rooms: RoomDirectory = Depends(get_room_directory),
):
    require_admin(user)
    return await rooms.create(room_data)


@app.patch("/api/rooms/{room_id}", response_model=RoomRead)
async def update_room(
    room_id: int,
    room_data: RoomUpdate,
    user: UserIdentity = Depends(current_user),
    rooms: RoomDirectory = Depends(get_room_directory),
):
    require_admin(user)
    return await rooms.update(room_id, room_data)


@app.delete("/api/rooms/{room_id}", response_model=RoomRead)
async def delete_room(
    room_id: int,
    user: UserIdentity = Depends(current_user),
    rooms: RoomDirectory = Depends(get_room_directory),
):
    require_admin(user)
    return await rooms.deactivate(room_id)


# --- Bookings ---

@app.post("/api/bookings", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    user: UserIdentity = Depends(current_user),
    service: BookingService = Depends(get_booking_service),
):
    outcome = await service.create_booking(user, booking_data)
    return BookingCreated(
        booking=BookingRead.model_validate(outcome.booking),
        room=RoomRead.model_validate(outcome.room),
        was_preferred_room=outcome.was_preferred_room,
    )


# Registered before /{booking_id} so "my" is not parsed as an id
@app.get("/api/bookings/my", response_model=List[BookingRead])
async def my_bookings(
    window: BookingWindow = BookingWindow.ALL,
    user: UserIdentity = Depends(current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_my_bookings(user, window)


@app.get("/api/bookings", response_model=List[BookingRead])
async def all_bookings(
    room_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
    user: UserIdentity = Depends(current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.list_all_bookings(
        user, status=booking_status, room_id=room_id, date_from=date_from, date_to=date_to
    )


@app.get("/api/bookings/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: int,
    user: UserIdentity = Depends(current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_booking(user, booking_id)


@app.patch("/api/bookings/{booking_id}", response_model=BookingRead)
async def reschedule_booking(
    booking_id: int,
    patch: BookingPatch,
    user: UserIdentity = Depends(current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.reschedule_booking(user, booking_id, patch)


@app.delete("/api/bookings/{booking_id}", response_model=BookingRead)
async def cancel_booking(
    booking_id: int,
    user: UserIdentity = Depends(current_user),
    service: BookingService = Depends(get_booking_service),
):
    return await service.cancel_booking(user, booking_id)


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
