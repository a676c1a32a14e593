"""Serializers for booking ratings."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import MAX_RATING, MIN_RATING, Review


class ReviewSerializer(serializers.ModelSerializer):
    """Read representation of a rating."""

    booking_id = serializers.ReadOnlyField(source="booking.id")
    equipment_id = serializers.ReadOnlyField(source="equipment.id")
    reviewer_id = serializers.ReadOnlyField(source="reviewer.id")
    reviewer_name = serializers.ReadOnlyField(source="reviewer.display_name")
    reviewee_id = serializers.ReadOnlyField()

    class Meta:
        model = Review
        fields = [
            "id",
            "booking_id",
            "equipment_id",
            "reviewer_id",
            "reviewer_name",
            "reviewee_id",
            "rate_type",
            "rating",
            "comment",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    """Payload for rating a booking."""

    booking_id = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField()
    comment = serializers.CharField(allow_blank=True, default="", max_length=2000)
    rate_type = serializers.ChoiceField(choices=Review.RateType.choices, default=Review.RateType.EQUIPMENT)

    def validate_rating(self, value: int) -> int:
        if not MIN_RATING <= value <= MAX_RATING:
            raise serializers.ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
        return value

    def validate_comment(self, value: str) -> str:
        return value.strip()
