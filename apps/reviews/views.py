"""API views for booking ratings."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Review
from .serializers import ReviewCreateSerializer, ReviewSerializer
from .services import submit_rating


class ReviewViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """Public list of ratings; participants rate their completed bookings."""

    queryset = Review.objects.select_related("reviewer", "booking", "equipment")
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return ReviewCreateSerializer
        return ReviewSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        equipment_id = self.request.query_params.get("equipment")
        if equipment_id and equipment_id.isdigit():
            qs = qs.filter(equipment_id=equipment_id)
        booking_id = self.request.query_params.get("booking")
        if booking_id and booking_id.isdigit():
            qs = qs.filter(booking_id=booking_id)
        return qs

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        review, created = submit_rating(
            data["booking_id"],
            request.user,
            data["rating"],
            comment=data["comment"],
            rate_type=data["rate_type"],
        )
        return Response(
            ReviewSerializer(review, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
