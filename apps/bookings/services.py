"""Booking lifecycle services.

Every operation takes the acting user explicitly; views pass
``request.user`` and tasks or webhooks pass whatever identity they act for.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.db import IntegrityError, OperationalError  # type: ignore
from django.db.models import Count, Q, QuerySet, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from apps.equipment.models import Equipment
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import DateRange, Money

from .domain import lifecycle
from .domain.events import BookingCreated, BookingPaid, BookingStatusChanged
from .exceptions import (
    BookingBusyError,
    BookingConflictError,
    BookingForbidden,
    BookingNotFound,
    BookingValidationError,
    EquipmentNotFound,
    InvalidTransitionError,
)
from .models import Booking

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

LISTING_ROLES = ("renter", "owner")


def _booking_currency() -> str:
    return getattr(settings, "BOOKING_CURRENCY", "GHS")


def _lock_equipment(equipment_id: int) -> Equipment:
    """Fetch the equipment row with a lock that serialises bookings on it."""
    try:
        return Equipment.objects.select_for_update().get(pk=equipment_id)
    except Equipment.DoesNotExist:
        raise EquipmentNotFound(f"Equipment {equipment_id} does not exist.")


def _lock_booking(**lookup) -> Booking:  # type: ignore
    try:
        return Booking.objects.select_for_update().get(**lookup)
    except Booking.DoesNotExist:
        raise BookingNotFound()


def _blocking_bookings(equipment_id: int) -> QuerySet:
    return Booking.objects.filter(
        equipment_id=equipment_id,
        status__in=Booking.NON_TERMINAL_STATUSES,
    )


def ensure_dates_free(equipment_id: int, dates: DateRange, *, exclude_booking_id: int | None = None) -> None:
    """Raise BookingConflictError if a non-terminal booking overlaps ``dates``."""
    overlapping = _blocking_bookings(equipment_id).filter(
        start_date__lte=dates.end_date,
        end_date__gte=dates.start_date,
    )
    if exclude_booking_id is not None:
        overlapping = overlapping.exclude(pk=exclude_booking_id)
    if overlapping.exists():
        raise BookingConflictError(errors={"dates": [f"{dates} overlaps an existing booking."]})


def has_blocking_bookings(equipment: Equipment) -> bool:
    return _blocking_bookings(equipment.id).exists()


def create_booking(
    renter: "CustomUser",
    equipment_id: int,
    start_date: date,
    end_date: date,
    *,
    today: date | None = None,
) -> Booking:
    """Create a pending booking for ``renter`` after validating dates and availability."""
    if not renter.is_renter():
        logger.warning(f"User {renter.id} with role '{renter.role}' tried to create a booking")
        raise BookingForbidden("Only renters can book equipment.")

    today = today or timezone.localdate()
    if start_date >= end_date:
        raise BookingValidationError(
            "End date must be after start date.",
            errors={"dates": ["End date must be after start date."]},
        )
    if start_date < today:
        raise BookingValidationError(
            "Start date cannot be in the past.",
            errors={"start_date": ["Start date cannot be in the past."]},
        )
    dates = DateRange(start_date, end_date)

    try:
        with DjangoUnitOfWork() as uow:
            equipment = _lock_equipment(equipment_id)
            if not equipment.is_available:
                raise BookingValidationError(
                    "Equipment is not available for rent.",
                    errors={"equipment_id": ["Equipment is not available for rent."]},
                )

            ensure_dates_free(equipment.id, dates)

            price = Money(equipment.price_per_day, _booking_currency())
            total = (price * len(dates)).quantize()
            booking = Booking.objects.create(
                booking_number=Booking.generate_booking_number(),
                renter=renter,
                owner_id=equipment.owner_id,
                equipment=equipment,
                start_date=dates.start_date,
                end_date=dates.end_date,
                total_days=len(dates),
                price_per_day=price.amount,
                total_amount=total.amount,
                currency=total.currency,
            )
            uow.add_event(
                BookingCreated(
                    aggregate_id=booking.id,
                    booking_number=booking.booking_number,
                    equipment_id=equipment.id,
                    renter_id=renter.id,
                    owner_id=equipment.owner_id,
                    dates=dates,
                    total=total,
                )
            )
    except BookingConflictError:
        logger.warning(f"Booking conflict for equipment {equipment_id} on {dates}")
        raise
    except IntegrityError as exc:
        # Raised by the exclusion constraint when a concurrent request won the race
        logger.warning(f"Booking for equipment {equipment_id} on {dates} rejected by storage: {exc}")
        raise BookingConflictError() from exc
    except OperationalError as exc:
        # SQLite gives up waiting for its file lock with "database is locked"
        if "locked" not in str(exc):
            raise
        logger.warning(f"Booking for equipment {equipment_id} on {dates} hit a busy database: {exc}")
        raise BookingBusyError() from exc

    logger.info(
        f"Booking {booking.booking_number} created: equipment {equipment_id}, "
        f"{booking.total_days} days, {total}"
    )
    return booking


def transition_status(
    booking_id: int,
    actor: "CustomUser",
    new_status: str,
    *,
    reason: str = "",
) -> Booking:
    """Move a booking along its lifecycle on behalf of ``actor``."""
    new_status = str(new_status)
    if new_status not in lifecycle.KNOWN_STATUSES:
        raise BookingValidationError(
            f"Unknown booking status '{new_status}'.",
            errors={"status": [f"Unknown booking status '{new_status}'."]},
        )

    try:
        with DjangoUnitOfWork() as uow:
            booking = _lock_booking(pk=booking_id)
            previous = booking.status
            lifecycle.ensure_transition_allowed(previous, new_status)
            lifecycle.ensure_actor_may_apply(booking, actor, new_status)

            update_fields = ["status", "updated_at"]
            booking.status = new_status
            if new_status == Booking.Status.CANCELLED:
                booking.cancellation_reason = reason[:255]
                update_fields.append("cancellation_reason")
                if booking.payment_status == Booking.PaymentStatus.PAID:
                    booking.payment_status = Booking.PaymentStatus.REFUNDED
                    update_fields.append("payment_status")
            booking.save(update_fields=update_fields)

            uow.add_event(
                BookingStatusChanged(
                    aggregate_id=booking.id,
                    booking_number=booking.booking_number,
                    previous_status=previous,
                    new_status=new_status,
                    actor_id=actor.id,
                    renter_id=booking.renter_id,
                    owner_id=booking.owner_id,
                    payment_status=booking.payment_status,
                    reason=reason,
                )
            )
    except (InvalidTransitionError, BookingForbidden) as exc:
        logger.warning(f"Status change of booking {booking_id} to '{new_status}' by user {actor.id} refused: {exc}")
        raise

    logger.info(f"Booking {booking.booking_number}: {previous} -> {new_status} by user {actor.id}")
    return booking


def confirm_payment(booking_number: str, *, payment_reference: str = "") -> Booking:
    """
    Mark an approved booking as paid and active.

    Safe to call repeatedly for the same booking: once paid, further
    confirmations return the booking unchanged.
    """
    with DjangoUnitOfWork() as uow:
        booking = _lock_booking(booking_number=booking_number)
        if booking.payment_status == Booking.PaymentStatus.PAID:
            logger.info(f"Payment for booking {booking_number} already confirmed, ignoring")
            return booking

        lifecycle.ensure_transition_allowed(booking.status, Booking.Status.ACTIVE)

        booking.payment_status = Booking.PaymentStatus.PAID
        booking.status = Booking.Status.ACTIVE
        booking.payment_reference = payment_reference[:100]
        booking.save(update_fields=["payment_status", "status", "payment_reference", "updated_at"])

        uow.add_event(
            BookingPaid(
                aggregate_id=booking.id,
                booking_number=booking.booking_number,
                renter_id=booking.renter_id,
                owner_id=booking.owner_id,
                amount=Money(booking.total_amount, booking.currency),
                payment_reference=booking.payment_reference,
            )
        )

    logger.info(f"Payment confirmed for booking {booking_number} (reference '{payment_reference}')")
    return booking


def booking_stats(bookings: QuerySet) -> dict:
    """Dashboard counters for a set of bookings."""
    totals = bookings.aggregate(
        active_count=Count("id", filter=Q(status=Booking.Status.ACTIVE)),
        pending_count=Count("id", filter=Q(status=Booking.Status.PENDING)),
        total_paid=Sum("total_amount", filter=Q(payment_status=Booking.PaymentStatus.PAID)),
    )
    totals["total_paid"] = (totals["total_paid"] or Decimal("0.00")).quantize(Decimal("0.01"))
    return totals


def list_bookings(
    user: "CustomUser",
    role: str | None = None,
    status: str | None = None,
) -> tuple[QuerySet, dict]:
    """Bookings where ``user`` takes part as renter or owner, newest first, with stats."""
    if role is None:
        role = "owner" if user.is_owner() else "renter"
    if role not in LISTING_ROLES:
        raise BookingValidationError(
            f"Unknown role '{role}'.",
            errors={"role": [f"Role must be one of: {', '.join(LISTING_ROLES)}."]},
        )
    if status is not None:
        status = str(status)
    if status is not None and status not in lifecycle.KNOWN_STATUSES:
        raise BookingValidationError(
            f"Unknown booking status '{status}'.",
            errors={"status": [f"Unknown booking status '{status}'."]},
        )

    qs = Booking.objects.select_related("equipment", "renter", "owner")
    qs = qs.filter(renter=user) if role == "renter" else qs.filter(owner=user)
    stats = booking_stats(qs)
    if status is not None:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at", "-id"), stats


def check_availability(equipment_id: int, as_of: date | None = None) -> list[DateRange]:
    """Date ranges held by non-terminal bookings that end on or after ``as_of``."""
    if not Equipment.objects.filter(pk=equipment_id).exists():
        raise EquipmentNotFound(f"Equipment {equipment_id} does not exist.")

    as_of = as_of or timezone.localdate()
    rows = (
        _blocking_bookings(equipment_id)
        .filter(end_date__gte=as_of)
        .order_by("start_date", "id")
        .values_list("start_date", "end_date")
    )
    return [DateRange(start, end) for start, end in rows]
