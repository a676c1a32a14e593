import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("equipment", "0001_initial"),
        ("bookings", "0002_booking_no_overlap"),
    ]

    operations = [
        migrations.AlterField(
            model_name="booking",
            name="equipment",
            field=models.ForeignKey(
                on_delete=django.db.models.deletion.PROTECT,
                related_name="bookings",
                to="equipment.equipment",
            ),
        ),
    ]
