from datetime import date, datetime, time
from itertools import combinations

from intervals import overlaps
from models import BookingStatus
from schemas import BookingCreate

# Monday morning; every booking in the tests is later the same day or after
NOW = datetime(2030, 1, 14, 8, 0)
DAY = date(2030, 1, 14)


def booking_request(start, end, day=DAY, preferred_room_id=None, purpose="Team sync") -> BookingCreate:
    """Build a create request; ``start``/``end`` are ``(hour, minute)`` tuples."""
    return BookingCreate(
        booking_date=day,
        start_time=time(*start),
        end_time=time(*end),
        purpose=purpose,
        preferred_room_id=preferred_room_id,
    )


def assert_no_double_booking(bookings):
    live = [b for b in bookings if b.status != BookingStatus.CANCELLED]
    for a, b in combinations(live, 2):
        if a.room_id == b.room_id:
            assert not overlaps(a.interval, b.interval), f"bookings {a.id} and {b.id} overlap"
