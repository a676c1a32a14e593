"""
Unit of Work Pattern

Wraps a database transaction and makes sure domain events collected while
it is open are published only after the transaction commits.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
            booking.status = Booking.Status.APPROVED
            booking.save(update_fields=["status", "updated_at"])
            uow.add_event(BookingStatusChanged(...))
        # Events are published after commit

    If the block raises, the transaction is rolled back, the collected
    events are discarded and the exception propagates to the caller.
    """

    def __init__(self, using: str | None = None):
        self._using = using
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def commit(self):
        """
        Schedule publishing of the collected events

        Events are published using Django's transaction.on_commit()
        so they are only sent after the outermost commit succeeds.
        """
        events = self._events.copy()
        self._events.clear()

        if events:
            logger.debug(f"Scheduling {len(events)} events for publishing on commit")
            transaction.on_commit(lambda: self._publish_events(events), using=self._using)

    def rollback(self):
        """Discard collected events; the atomic block rolls back the data."""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    @staticmethod
    def _publish_events(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")

        try:
            message_bus.publish_events(events)
        except Exception as e:
            # The booking is already committed; delivery problems are only logged
            logger.error(f"Error publishing events: {e}", exc_info=True)
