"""Admin registration for equipment listings."""

from __future__ import annotations

from django.contrib import admin

from .models import Equipment


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "owner", "city", "price_per_day", "is_available", "average_rating", "created_at")
    list_filter = ("category", "city", "is_available")
    search_fields = ("name", "description", "owner__email")
    readonly_fields = ("created_at", "updated_at")
