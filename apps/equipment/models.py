"""Equipment listing models for Cr8Kit."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Equipment(models.Model):
    """A piece of creative equipment listed for daily rental."""

    class Category(models.TextChoices):
        CAMERAS = "Cameras", _("Cameras")
        LIGHTING = "Lighting", _("Lighting")
        AUDIO = "Audio", _("Audio")
        DRONES = "Drones", _("Drones")
        ACCESSORIES = "Accessories", _("Accessories")
        OTHER = "Other", _("Other")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="equipment",
    )
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=20, choices=Category.choices)
    description = models.TextField()
    price_per_day = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    location = models.CharField(max_length=255)
    city = models.CharField(max_length=100, default="Accra")
    image_url = models.URLField(max_length=500, blank=True)
    is_available = models.BooleanField(
        default=True,
        help_text=_("Owner-controlled listing switch. Bookings never change it."),
    )
    average_rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        null=True,
        blank=True,
        help_text=_("Mean of equipment ratings, one decimal. Empty until first rated."),
    )
    rating_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Equipment")
        verbose_name_plural = _("Equipment")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_day__gt=0),
                name="equipment_positive_price",
            ),
        ]
        indexes = [
            models.Index(fields=["category", "city"], name="equipment_category_city_idx"),
            models.Index(fields=["is_available"], name="equipment_available_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.category})"
