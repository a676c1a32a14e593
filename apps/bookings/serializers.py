"""Serializers for the booking API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Input for a new booking request."""

    equipment_id = serializers.IntegerField(min_value=1)
    start_date = serializers.DateField()
    end_date = serializers.DateField()


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=["renter", "owner"], required=False)
    status = serializers.ChoiceField(choices=Booking.Status.choices, required=False)


class BookingSerializer(serializers.ModelSerializer):
    """Booking as seen by its renter or owner."""

    equipment_id = serializers.ReadOnlyField(source="equipment.id")
    equipment_name = serializers.ReadOnlyField(source="equipment.name")
    equipment_category = serializers.ReadOnlyField(source="equipment.category")
    renter_id = serializers.ReadOnlyField(source="renter.id")
    renter_name = serializers.ReadOnlyField(source="renter.display_name")
    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_name = serializers.ReadOnlyField(source="owner.display_name")

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_number",
            "equipment_id",
            "equipment_name",
            "equipment_category",
            "renter_id",
            "renter_name",
            "owner_id",
            "owner_name",
            "start_date",
            "end_date",
            "total_days",
            "price_per_day",
            "total_amount",
            "currency",
            "status",
            "payment_status",
            "payment_reference",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingStatsSerializer(serializers.Serializer):
    active_count = serializers.IntegerField()
    pending_count = serializers.IntegerField()
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2)
