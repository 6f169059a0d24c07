# backend/kitrent/errors.py
"""
Booking error taxonomy.

    BookingError
    ├── InvalidInput          bad date / slot / service reference (400)
    │   └── InvalidSlot
    ├── Conflict              expected, retry with another slot (409)
    │   ├── NoAvailableKit
    │   └── ConcurrencyConflict
    ├── NotFound              unknown booking id (404)
    ├── InvalidTransition     lifecycle move not allowed (400)
    └── PermissionDenied      caller does not own the booking (403)
"""


class BookingError(Exception):
    """Base class for expected, caller-facing booking failures."""

    status_code = 400
    default_detail = "Booking error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInput(BookingError):
    default_detail = "Invalid input"


class InvalidSlot(InvalidInput):
    default_detail = "Time slot not available"


class Conflict(BookingError):
    status_code = 409
    default_detail = "Conflict"


class NoAvailableKit(Conflict):
    default_detail = "No available kits for this time slot"


class ConcurrencyConflict(Conflict):
    default_detail = "Time slot already booked"


class NotFound(BookingError):
    status_code = 404
    default_detail = "Booking not found"


class InvalidTransition(BookingError):
    default_detail = "Invalid status transition"


class PermissionDenied(BookingError):
    status_code = 403
    default_detail = "Not your booking"
