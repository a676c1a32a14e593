"""
Booking Lifecycle

The status state machine and the rules deciding who may move a booking
along it. Pure functions over plain values so they are usable from
services, admin actions and tests alike.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from ..exceptions import BookingForbidden, InvalidTransitionError

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
ACTIVE = "active"
COMPLETED = "completed"
CANCELLED = "cancelled"

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({APPROVED, REJECTED, CANCELLED}),
    APPROVED: frozenset({ACTIVE, CANCELLED}),
    ACTIVE: frozenset({COMPLETED, CANCELLED}),
    REJECTED: frozenset(),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}

KNOWN_STATUSES: FrozenSet[str] = frozenset(ALLOWED_TRANSITIONS)


def is_transition_allowed(current: str, requested: str) -> bool:
    return str(requested) in ALLOWED_TRANSITIONS.get(str(current), frozenset())


def ensure_transition_allowed(current: str, requested: str) -> None:
    if not is_transition_allowed(current, requested):
        raise InvalidTransitionError(current, requested)


def ensure_actor_may_apply(booking, actor, requested: str) -> None:  # type: ignore
    """
    Check that ``actor`` may move ``booking`` to ``requested``.

    - only the renter or the owner of the booking may act on it
    - approval is reserved for the owner, acting with the owner role
    - nobody activates a booking by hand; ``confirm_payment`` does it
    """
    if not booking.is_participant(actor):
        raise BookingForbidden("Only the renter or the owner can change this booking.")

    if requested == APPROVED:
        if actor.id != booking.owner_id or not actor.is_owner():
            raise BookingForbidden("Only the equipment owner can approve a booking.")
    elif requested == ACTIVE:
        raise BookingForbidden("A booking becomes active once its payment is confirmed.")
