from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("fleet", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("reference", models.CharField(editable=False, max_length=12, unique=True)),
                ("start_date", models.DateField(verbose_name="Pickup day")),
                ("end_date", models.DateField(verbose_name="Return day")),
                ("days", models.PositiveSmallIntegerField(default=1)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("in_progress", "In progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "daily_rate",
                    models.DecimalField(
                        decimal_places=0,
                        help_text="Vehicle daily rate at the time of booking.",
                        max_digits=10,
                    ),
                ),
                (
                    "subtotal",
                    models.DecimalField(
                        decimal_places=0,
                        default=Decimal("0"),
                        help_text="Vehicle, equipment and activities before discount and tax.",
                        max_digits=12,
                    ),
                ),
                ("discount_rate", models.DecimalField(decimal_places=4, default=Decimal("0"), max_digits=5)),
                ("discount_amount", models.DecimalField(decimal_places=0, default=Decimal("0"), max_digits=12)),
                ("tax", models.DecimalField(decimal_places=0, default=Decimal("0"), max_digits=12)),
                ("total", models.DecimalField(decimal_places=0, default=Decimal("0"), max_digits=12)),
                ("currency", models.CharField(default="JPY", max_length=3)),
                ("loyalty_tier", models.CharField(blank=True, max_length=50)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("credit_card", "Credit card"), ("on_site", "Pay on site")],
                        default="on_site",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "payment_reference",
                    models.CharField(
                        blank=True, help_text="Transaction id returned by the payment gateway.", max_length=255
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancellation_reason", models.CharField(blank=True, max_length=255)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="fleet.rentalvehicle",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vehicle", "start_date", "end_date"], name="reservation_vehicle_dates_idx"),
                    models.Index(fields=["status"], name="reservation_status_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("start_date__lte", models.F("end_date"))),
                        name="reservation_valid_dates",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("days__gte", 1)),
                        name="reservation_days_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationActivity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("participants", models.PositiveIntegerField(default=1)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=0, help_text="Price per participant at the time of booking.", max_digits=10
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=0, max_digits=12)),
                (
                    "activity",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservation_lines",
                        to="fleet.activity",
                    ),
                ),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activity_lines",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation activity",
                "verbose_name_plural": "Reservation activities",
                "ordering": ["date", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("participants__gte", 1)),
                        name="reservation_activity_participants_positive",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationEquipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("days", models.PositiveSmallIntegerField(default=1)),
                ("price_per_day", models.DecimalField(decimal_places=0, max_digits=10)),
                ("pricing_type", models.CharField(max_length=20)),
                ("subtotal", models.DecimalField(decimal_places=0, max_digits=12)),
                (
                    "equipment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservation_lines",
                        to="fleet.equipment",
                    ),
                ),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="equipment_lines",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation equipment",
                "verbose_name_plural": "Reservation equipment",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("reservation", "equipment"), name="reservation_equipment_unique"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 1)),
                        name="reservation_equipment_quantity_positive",
                    ),
                ],
            },
        ),
    ]
