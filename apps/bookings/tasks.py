"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.notifications import services as notifications

from .models import Booking

logger = logging.getLogger(__name__)


def _load(booking_number: str) -> Booking | None:
    try:
        return Booking.objects.select_related("equipment", "renter", "owner").get(booking_number=booking_number)
    except Booking.DoesNotExist:
        logger.warning(f"Booking {booking_number} vanished before its notification was sent")
        return None


@shared_task(name="bookings.notify_booking_created")
def notify_booking_created(booking_number: str) -> dict[str, bool] | None:
    """Tell the owner about a new booking request."""
    booking = _load(booking_number)
    if booking is None:
        return None
    return notifications.notify_booking_requested(booking)


@shared_task(name="bookings.notify_booking_status_changed")
def notify_booking_status_changed(booking_number: str, actor_id: int | None = None) -> dict[str, bool] | None:
    booking = _load(booking_number)
    if booking is None:
        return None
    return notifications.notify_booking_status_changed(booking, actor_id)


@shared_task(name="bookings.notify_booking_paid")
def notify_booking_paid(booking_number: str) -> dict | None:
    booking = _load(booking_number)
    if booking is None:
        return None
    return notifications.notify_booking_paid(booking)
