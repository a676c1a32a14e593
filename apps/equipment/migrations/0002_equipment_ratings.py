from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("equipment", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="equipment",
            name="average_rating",
            field=models.DecimalField(
                blank=True,
                decimal_places=1,
                help_text="Mean of equipment ratings, one decimal. Empty until first rated.",
                max_digits=2,
                null=True,
            ),
        ),
        migrations.AddField(
            model_name="equipment",
            name="rating_count",
            field=models.PositiveIntegerField(default=0),
        ),
    ]
