from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Equipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Cameras", "Cameras"),
                            ("Lighting", "Lighting"),
                            ("Audio", "Audio"),
                            ("Drones", "Drones"),
                            ("Accessories", "Accessories"),
                            ("Other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.TextField()),
                (
                    "price_per_day",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("location", models.CharField(max_length=255)),
                ("city", models.CharField(default="Accra", max_length=100)),
                ("image_url", models.URLField(blank=True, max_length=500)),
                (
                    "is_available",
                    models.BooleanField(
                        default=True,
                        help_text="Owner-controlled listing switch. Bookings never change it.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="equipment",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Equipment",
                "verbose_name_plural": "Equipment",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["category", "city"], name="equipment_category_city_idx"),
                    models.Index(fields=["is_available"], name="equipment_available_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(price_per_day__gt=0), name="equipment_positive_price"),
                ],
            },
        ),
    ]
