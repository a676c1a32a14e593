"""Equipment listing API views."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.services import check_availability, has_blocking_bookings
from shared.domain.exceptions import Conflict

from .filters import EquipmentFilterSet
from .models import Equipment
from .serializers import (
    AvailabilityQuerySerializer,
    BlockedRangeSerializer,
    EquipmentSerializer,
    EquipmentWriteSerializer,
)

logger = logging.getLogger(__name__)


class IsEquipmentOwnerOrAdmin(permissions.BasePermission):
    """Owners manage their own listings; only owner accounts may create them."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if user.is_platform_admin():
            return True
        if getattr(view, "action", None) == "create":
            return user.is_owner()
        return True

    def has_object_permission(self, request, view, obj: Equipment):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if user.is_platform_admin():
            return True
        return obj.owner_id == user.id


class EquipmentViewSet(viewsets.ModelViewSet):
    """Browse, list and manage rentable equipment."""

    queryset = Equipment.objects.select_related("owner")
    permission_classes = [IsEquipmentOwnerOrAdmin]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = EquipmentFilterSet
    ordering_fields = ["price_per_day", "created_at", "name"]

    def get_permissions(self):  # type: ignore
        if self.action in {"list", "retrieve", "availability"}:
            return [permissions.AllowAny()]
        return super().get_permissions()

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if self.action in {"list", "retrieve", "availability"}:
            if user.is_authenticated and user.is_platform_admin():
                return qs
            if user.is_authenticated and user.is_owner():
                # Owners also see their own unlisted items
                return qs.filter(Q(is_available=True) | Q(owner=user))
            return qs.filter(is_available=True)
        return qs

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return EquipmentWriteSerializer
        return EquipmentSerializer

    def perform_create(self, serializer):  # type: ignore
        equipment = serializer.save()
        logger.info(f"Equipment {equipment.id} listed by user {self.request.user.id}")

    def destroy(self, request, *args, **kwargs):  # type: ignore
        """
        Delete a listing, or unlist it when bookings reference it.

        The equipment row lock is the one ``create_booking`` takes, so no
        booking can be created between the check and the delete.
        """
        instance = self.get_object()
        with transaction.atomic():
            equipment = get_object_or_404(Equipment.objects.select_for_update(), pk=instance.pk)
            if has_blocking_bookings(equipment):
                raise Conflict(
                    "Cannot delete equipment with pending, approved or active bookings.",
                    code="equipment_in_use",
                )
            if equipment.bookings.exists():
                equipment.is_available = False
                equipment.save(update_fields=["is_available", "updated_at"])
                logger.info(f"Equipment {equipment.id} unlisted by user {request.user.id}, booking history kept")
                return Response(EquipmentSerializer(equipment, context=self.get_serializer_context()).data)
            equipment.delete()

        logger.info(f"Equipment {instance.pk} deleted by user {request.user.id}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def availability(self, request, pk=None):  # type: ignore
        """Date ranges already claimed by non-terminal bookings."""
        equipment = self.get_object()
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        ranges = check_availability(equipment.id, as_of=query.validated_data.get("as_of"))
        return Response(
            {
                "equipment_id": equipment.id,
                "blocked": BlockedRangeSerializer(ranges, many=True).data,
            }
        )
