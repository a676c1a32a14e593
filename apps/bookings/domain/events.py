"""
Booking Domain Events

Published after the surrounding transaction commits.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    A renter requested equipment

    Triggers:
    - Notify the equipment owner about the new request
    """
    booking_number: str
    equipment_id: int
    renter_id: int
    owner_id: int
    dates: DateRange
    total: Money


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    A booking moved along its lifecycle

    Triggers:
    - Notify the other participant
    """
    booking_number: str
    previous_status: str
    new_status: str
    actor_id: int | None
    renter_id: int
    owner_id: int
    payment_status: str
    reason: str = ""


@dataclass(kw_only=True)
class BookingPaid(DomainEvent):
    """
    Payment for an approved booking was confirmed (APPROVED -> ACTIVE)

    Triggers:
    - Notify renter and owner
    """
    booking_number: str
    renter_id: int
    owner_id: int
    amount: Money
    payment_reference: str = ""
