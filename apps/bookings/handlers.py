"""
Booking event handlers

Subscribed to the message bus when the app is ready. Each handler only
enqueues a Celery task; a broker outage is logged and the booking change,
already committed, stands.
"""

import logging

from shared.application.message_bus import message_bus

from .domain.events import BookingCreated, BookingPaid, BookingStatusChanged
from . import tasks

logger = logging.getLogger(__name__)


def _enqueue(task, *args) -> None:  # type: ignore
    try:
        task.delay(*args)
    except Exception as e:
        logger.error(f"Failed to enqueue {task.name} for {args}: {e}", exc_info=True)


@message_bus.subscribe(BookingCreated)
def on_booking_created(event: BookingCreated) -> None:
    _enqueue(tasks.notify_booking_created, event.booking_number)


@message_bus.subscribe(BookingStatusChanged)
def on_booking_status_changed(event: BookingStatusChanged) -> None:
    _enqueue(tasks.notify_booking_status_changed, event.booking_number, event.actor_id)


@message_bus.subscribe(BookingPaid)
def on_booking_paid(event: BookingPaid) -> None:
    _enqueue(tasks.notify_booking_paid, event.booking_number)
