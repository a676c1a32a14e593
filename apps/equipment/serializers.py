"""Serializers for equipment listings and their availability calendar."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Equipment


class EquipmentSerializer(serializers.ModelSerializer):
    """Read representation of a listing."""

    owner_id = serializers.ReadOnlyField(source="owner.id")
    owner_name = serializers.ReadOnlyField(source="owner.display_name")

    class Meta:
        model = Equipment
        fields = [
            "id",
            "owner_id",
            "owner_name",
            "name",
            "category",
            "description",
            "price_per_day",
            "location",
            "city",
            "image_url",
            "is_available",
            "average_rating",
            "rating_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class EquipmentWriteSerializer(serializers.ModelSerializer):
    """Create/update payload for owners."""

    class Meta:
        model = Equipment
        fields = [
            "name",
            "category",
            "description",
            "price_per_day",
            "location",
            "city",
            "image_url",
            "is_available",
        ]
        extra_kwargs = {
            "city": {"required": False},
            "image_url": {"required": False, "allow_blank": True},
            "is_available": {"required": False},
        }

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Equipment name is required.")
        return value

    def create(self, validated_data):  # type: ignore
        validated_data["owner"] = self.context["request"].user
        return super().create(validated_data)

    def to_representation(self, instance):  # type: ignore
        return EquipmentSerializer(instance, context=self.context).data


class AvailabilityQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)


class BlockedRangeSerializer(serializers.Serializer):
    """A date range (inclusive) that is not bookable."""

    start_date = serializers.DateField()
    end_date = serializers.DateField()
