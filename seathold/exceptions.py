"""Errors raised by the reservation core.

Conflicts and expiry are ordinary outcomes of concurrent booking; callers are
expected to handle them by refreshing the seat map and starting over.
"""

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Coarse error taxonomy used to map failures to responses."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    EXPIRED = "expired"
    VALIDATION = "validation"


class ReservationError(Exception):
    """Base class for reservation and booking errors."""

    code = "reservation_error"
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Extra fields for the error payload."""
        return {}


class EventNotFound(ReservationError):
    code = "event_not_found"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class ReservationNotFound(ReservationError):
    code = "reservation_not_found"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, token: str):
        super().__init__("Reservation not found")
        self.token = token


class BookingNotFound(ReservationError):
    code = "booking_not_found"
    category = ErrorCategory.NOT_FOUND

    def __init__(self, key: int | str):
        super().__init__(f"Booking {key} not found")
        self.key = key


class SeatUnavailable(ReservationError):
    """One or more requested seats are held or booked by someone else."""

    code = "seat_unavailable"
    category = ErrorCategory.CONFLICT

    def __init__(
        self,
        seat_ids: list[int],
        seat_numbers: list[str] | None = None,
        message: str | None = None,
    ):
        self.seat_ids = list(seat_ids)
        self.seat_numbers = list(seat_numbers or [])
        if message is None:
            names = self.seat_numbers or [str(s) for s in self.seat_ids]
            message = f"Seats not available: {', '.join(names)}"
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"seat_ids": self.seat_ids, "seat_numbers": self.seat_numbers}


class ReservationExpired(ReservationError):
    code = "reservation_expired"
    category = ErrorCategory.EXPIRED

    def __init__(self, token: str):
        super().__init__("Reservation has expired. Please select your seats again.")
        self.token = token


class InvalidSeatCount(ReservationError):
    code = "invalid_seat_count"

    def __init__(self, count: int, maximum: int):
        super().__init__(f"Between 1 and {maximum} seats must be requested, got {count}")
        self.count = count
        self.maximum = maximum

    def details(self) -> dict[str, Any]:
        return {"count": self.count, "maximum": self.maximum}


class InvalidSeatSelection(ReservationError):
    """Requested seats do not exist or belong to a different event."""

    code = "invalid_seat_selection"

    def __init__(self, event_id: int, seat_ids: list[int]):
        super().__init__(
            f"Seats {', '.join(str(s) for s in seat_ids)} do not belong to event {event_id}"
        )
        self.event_id = event_id
        self.seat_ids = list(seat_ids)

    def details(self) -> dict[str, Any]:
        return {"seat_ids": self.seat_ids}


class InvalidCustomerInfo(ReservationError):
    code = "invalid_customer_info"


class InvalidPaymentInfo(ReservationError):
    code = "invalid_payment_info"
