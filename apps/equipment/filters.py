"""FilterSet definitions for browsing equipment listings."""

from __future__ import annotations

import django_filters  # type: ignore
from django.db.models import Q  # type: ignore

from .models import Equipment


class EquipmentFilterSet(django_filters.FilterSet):
    """Browse filters mirrored from the marketplace search page."""

    category = django_filters.ChoiceFilter(field_name="category", choices=Equipment.Category.choices)
    city = django_filters.CharFilter(field_name="city", lookup_expr="icontains")
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="price_per_day", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price_per_day", lookup_expr="lte")
    available = django_filters.BooleanFilter(field_name="is_available")
    search = django_filters.CharFilter(method="filter_search")
    mine = django_filters.BooleanFilter(method="filter_mine")

    class Meta:
        model = Equipment
        fields = ["category", "city", "location", "available"]

    def filter_search(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(description__icontains=value))

    def filter_mine(self, queryset, name, value):  # type: ignore
        user = getattr(self.request, "user", None)
        if not value or user is None or not user.is_authenticated:
            return queryset
        return queryset.filter(owner=user)
