"""Models for booking ratings.

A ``Review`` is one participant's 1 to 5 star rating of a completed
booking. Each participant holds at most one review per booking;
submitting again overwrites it.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

MIN_RATING = 1
MAX_RATING = 5


class Review(models.Model):
    """A rating left by the renter or the owner of a completed booking."""

    class RateType(models.TextChoices):
        EQUIPMENT = "equipment", _("Equipment")
        USER = "user", _("User")

    booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_given",
    )
    reviewee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reviews_received",
        null=True,
        blank=True,
        help_text=_("The other participant, set for user ratings only."),
    )
    equipment = models.ForeignKey(
        "equipment.Equipment",
        on_delete=models.CASCADE,
        related_name="reviews",
    )
    rate_type = models.CharField(max_length=10, choices=RateType.choices, default=RateType.EQUIPMENT)
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)],
        help_text=_("Rating from 1 to 5"),
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["booking", "reviewer"], name="review_one_per_booking_reviewer"),
            models.CheckConstraint(
                condition=models.Q(rating__gte=MIN_RATING, rating__lte=MAX_RATING),
                name="review_rating_range",
            ),
        ]
        indexes = [
            models.Index(fields=["equipment", "rate_type"], name="review_equipment_type_idx"),
        ]

    def __str__(self) -> str:
        return f"Review by {self.reviewer_id} for booking {self.booking_id} ({self.rating}/5)"
