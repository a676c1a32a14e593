"""Rating services for completed bookings."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from django.db import transaction  # type: ignore
from django.db.models import Count, Sum  # type: ignore

from apps.bookings.exceptions import BookingForbidden, BookingNotFound
from apps.bookings.models import Booking
from apps.equipment.models import Equipment
from shared.domain.exceptions import ValidationFailed

from .models import MAX_RATING, MIN_RATING, Review

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


def _validate_input(rating: int, rate_type: str) -> None:
    errors: dict = {}
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        errors["rating"] = [f"Rating must be between {MIN_RATING} and {MAX_RATING}."]
    if str(rate_type) not in Review.RateType.values:
        errors["rate_type"] = [f"Rate type must be one of: {', '.join(Review.RateType.values)}."]
    if errors:
        raise ValidationFailed("Invalid rating.", errors=errors)


def refresh_equipment_rating(equipment_id: int) -> Equipment:
    """Recompute the stored average over every equipment rating of the item."""
    equipment = Equipment.objects.select_for_update().get(pk=equipment_id)
    totals = Review.objects.filter(
        equipment_id=equipment_id,
        rate_type=Review.RateType.EQUIPMENT,
    ).aggregate(total=Sum("rating"), count=Count("id"))

    count = totals["count"] or 0
    equipment.rating_count = count
    equipment.average_rating = (
        (Decimal(totals["total"]) / count).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP) if count else None
    )
    equipment.save(update_fields=["average_rating", "rating_count", "updated_at"])
    return equipment


def submit_rating(
    booking_id: int,
    reviewer: "CustomUser",
    rating: int,
    *,
    comment: str = "",
    rate_type: str = Review.RateType.EQUIPMENT,
) -> tuple[Review, bool]:
    """
    Record ``reviewer``'s rating of a completed booking.

    Returns the review and whether it was newly created. A participant
    who rates the same booking again overwrites the earlier rating.
    """
    _validate_input(rating, rate_type)
    rate_type = str(rate_type)

    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
        except Booking.DoesNotExist:
            raise BookingNotFound()

        if not booking.is_participant(reviewer):
            logger.warning(f"User {reviewer.id} tried to rate booking {booking.booking_number} without taking part")
            raise BookingForbidden("You can only rate bookings you are part of.")
        if booking.status != Booking.Status.COMPLETED:
            raise ValidationFailed(
                "You can only rate completed bookings.",
                errors={"booking_id": [f"Booking is '{booking.status}', not 'completed'."]},
            )

        reviewee_id = None
        if rate_type == Review.RateType.USER:
            reviewee_id = booking.owner_id if reviewer.id == booking.renter_id else booking.renter_id

        review, created = Review.objects.update_or_create(
            booking=booking,
            reviewer=reviewer,
            defaults={
                "equipment_id": booking.equipment_id,
                "reviewee_id": reviewee_id,
                "rate_type": rate_type,
                "rating": rating,
                "comment": comment,
            },
        )
        equipment = refresh_equipment_rating(booking.equipment_id)

    logger.info(
        f"Rating {rating}/{MAX_RATING} {'recorded' if created else 'updated'} for booking "
        f"{booking.booking_number} by user {reviewer.id}; equipment {equipment.id} now "
        f"{equipment.average_rating} over {equipment.rating_count}"
    )
    return review, created
