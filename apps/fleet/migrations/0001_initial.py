from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Activity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                ("description", models.TextField(blank=True)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=0, default=Decimal("0"), max_digits=10, verbose_name="Price per participant"
                    ),
                ),
                ("duration", models.CharField(blank=True, max_length=100)),
                ("location", models.CharField(blank=True, max_length=255)),
                (
                    "start_date",
                    models.DateField(blank=True, help_text="First day the activity is offered.", null=True),
                ),
                (
                    "end_date",
                    models.DateField(blank=True, help_text="Last day the activity is offered.", null=True),
                ),
                ("max_participants", models.PositiveIntegerField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Activity",
                "verbose_name_plural": "Activities",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Equipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                ("category", models.CharField(blank=True, max_length=100, verbose_name="Category")),
                ("description", models.TextField(blank=True)),
                (
                    "price_per_day",
                    models.DecimalField(
                        decimal_places=0,
                        help_text="Per day for per-day items, once per unit otherwise.",
                        max_digits=10,
                        verbose_name="Price",
                    ),
                ),
                (
                    "pricing_type",
                    models.CharField(
                        choices=[("per_day", "Per day"), ("per_unit", "Per unit")],
                        default="per_day",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Equipment",
                "verbose_name_plural": "Equipment",
                "ordering": ["category", "name"],
            },
        ),
        migrations.CreateModel(
            name="RentalVehicle",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                ("vehicle_type", models.CharField(blank=True, max_length=100, verbose_name="Vehicle type")),
                (
                    "license_plate",
                    models.CharField(blank=True, max_length=32, null=True, unique=True, verbose_name="License plate"),
                ),
                ("description", models.TextField(blank=True)),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=0,
                        help_text="Price per rental day in whole currency units.",
                        max_digits=10,
                        verbose_name="Daily rate",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("reserved", "Reserved"),
                            ("maintenance", "Maintenance"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                ("location", models.CharField(blank=True, max_length=255, verbose_name="Pickup location")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Rental vehicle",
                "verbose_name_plural": "Rental vehicles",
                "ordering": ["daily_rate", "name"],
                "indexes": [models.Index(fields=["status"], name="fleet_vehicle_status_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("daily_rate__gte", 0)),
                        name="rental_vehicle_daily_rate_non_negative",
                    )
                ],
            },
        ),
    ]
