"""Booking-specific errors, each mapped onto the shared domain taxonomy."""

from __future__ import annotations

from shared.domain.exceptions import Conflict, Forbidden, NotFound, ValidationFailed


class BookingValidationError(ValidationFailed):
    default_message = "Booking request is invalid."


class BookingNotFound(NotFound):
    default_message = "Booking not found."


class EquipmentNotFound(NotFound):
    default_message = "Equipment not found."


class BookingForbidden(Forbidden):
    default_message = "You are not allowed to change this booking."


class BookingConflictError(Conflict):
    """Requested dates overlap an existing booking of the same equipment."""

    default_code = "booking_conflict"
    default_message = "Equipment is already booked for the selected dates."


class BookingBusyError(Conflict):
    """The database could not take the write lock in time; the request may be retried."""

    default_code = "booking_busy"
    default_message = "Bookings for this equipment are being updated, please try again."


class InvalidTransitionError(Conflict):
    default_code = "invalid_transition"
    default_message = "This status change is not allowed."

    def __init__(self, current: str, requested: str):
        self.current = current = str(current)
        self.requested = requested = str(requested)
        super().__init__(
            f"Cannot move booking from '{current}' to '{requested}'.",
            errors={"status": [f"Allowed from '{current}': {', '.join(allowed_from(current)) or 'none'}."]},
        )


def allowed_from(current: str) -> list[str]:
    from .domain.lifecycle import ALLOWED_TRANSITIONS

    return sorted(ALLOWED_TRANSITIONS.get(str(current), frozenset()))
