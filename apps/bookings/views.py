"""API views for the booking lifecycle."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from . import services
from .models import Booking
from .serializers import (
    BookingCreateSerializer,
    BookingListQuerySerializer,
    BookingSerializer,
    BookingStatsSerializer,
    BookingStatusSerializer,
)


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Create, list and move bookings through their lifecycle."""

    queryset = Booking.objects.select_related("equipment", "renter", "owner")
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = BookingSerializer

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user.is_platform_admin():
            return qs
        return qs.filter(Q(renter=user) | Q(owner=user))

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.create_booking(request.user, **serializer.validated_data)
        read_serializer = BookingSerializer(booking, context=self.get_serializer_context())
        headers = self.get_success_headers(read_serializer.data)
        return Response(read_serializer.data, status=status.HTTP_201_CREATED, headers=headers)

    def list(self, request, *args, **kwargs):  # type: ignore
        query = BookingListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        bookings, stats = services.list_bookings(
            request.user,
            role=query.validated_data.get("role"),
            status=query.validated_data.get("status"),
        )
        return Response(
            {
                "bookings": BookingSerializer(bookings, many=True, context=self.get_serializer_context()).data,
                "stats": BookingStatsSerializer(stats).data,
            }
        )

    @action(detail=True, methods=["post"], url_path="status", url_name="status")
    def change_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = services.transition_status(
            booking.id,
            request.user,
            serializer.validated_data["status"],
            reason=serializer.validated_data.get("reason", ""),
        )
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)
