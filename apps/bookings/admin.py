"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_number",
        "equipment",
        "renter",
        "owner",
        "status",
        "payment_status",
        "start_date",
        "end_date",
        "total_amount",
        "created_at",
    )
    list_filter = ("status", "payment_status", "start_date", "end_date")
    search_fields = ("booking_number", "equipment__name", "renter__email", "owner__email", "payment_reference")
    readonly_fields = (
        "booking_number",
        "created_at",
        "updated_at",
        "total_amount",
        "total_days",
        "price_per_day",
    )
