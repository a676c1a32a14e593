"""Admin registration for ratings."""

from __future__ import annotations

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("booking", "equipment", "reviewer", "rate_type", "rating", "updated_at")
    list_filter = ("rate_type", "rating")
    search_fields = ("booking__booking_number", "equipment__name", "reviewer__email")
    readonly_fields = ("created_at", "updated_at")
