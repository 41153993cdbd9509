import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("reservations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="RentalChecklist",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "checklist_type",
                    models.CharField(
                        choices=[
                            ("pre_rental", "Pre-rental inspection"),
                            ("handover", "Handover"),
                            ("return", "Return inspection"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "items",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Checked items as a list of {id, label, checked} objects.",
                    ),
                ),
                ("notes", models.TextField(blank=True)),
                ("has_damage", models.BooleanField(default=False)),
                ("damage_notes", models.TextField(blank=True)),
                ("mileage", models.PositiveIntegerField(blank=True, help_text="Odometer reading in km.", null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "completed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="completed_checklists",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="checklists",
                        to="reservations.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Rental checklist",
                "verbose_name_plural": "Rental checklists",
                "ordering": ["created_at", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("reservation", "checklist_type"), name="rental_checklist_unique_type"
                    ),
                ],
            },
        ),
    ]
