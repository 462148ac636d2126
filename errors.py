"""Domain errors raised by the booking service.

Every error here is an expected outcome the caller can act on. Storage
failures are not part of this hierarchy; they surface as
``sqlalchemy.exc.SQLAlchemyError`` and are handled separately.
"""

from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base class for domain/service errors."""

    status_code = 400
    message = "Booking request rejected"

    def __init__(self, message: Optional[str] = None, **extra: Any) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "error": type(self).__name__, "message": self.message, **self.extra}


class InvalidInterval(BookingError):
    message = "End time must be after start time"


class BookingInPast(BookingError):
    message = "Cannot book in the past"


class RoomNotFound(BookingError):
    status_code = 404
    message = "Preferred room not found"


class RoomInactive(BookingError):
    message = "Preferred room is not active"


class NoRoomAvailable(BookingError):
    status_code = 409
    message = "No rooms available for the selected time slot"

    def __init__(self, preferred_room_unavailable: bool = False) -> None:
        super().__init__(preferred_room_unavailable=preferred_room_unavailable)
        self.preferred_room_unavailable = preferred_room_unavailable


class ScheduleConflict(BookingError):
    status_code = 409
    message = "Selected time slot conflicts with another booking"


class NotAuthorized(BookingError):
    status_code = 403
    message = "Not authorized to access this booking"


class CannotModifyCancelled(BookingError):
    message = "Cannot update cancelled booking"


class NotFound(BookingError):
    status_code = 404
    message = "Not found"


class RoomNameTaken(BookingError):
    status_code = 409
    message = "A room with this name already exists"


class NotAuthenticated(BookingError):
    status_code = 401
    message = "Not authenticated. Please login first."


class AdminRequired(BookingError):
    status_code = 403
    message = "Access denied. Admin privileges required."
