from decimal import Decimal

import django.core.validators
from django.db import migrations, models


def create_default_tiers(apps, schema_editor):
    LoyaltyTier = apps.get_model("loyalty", "LoyaltyTier")
    defaults = [
        ("Bronze", 0, 0, 0, Decimal("0"), 0),
        ("Silver", 100000, 10, 5, Decimal("0.03"), 1),
        ("Gold", 300000, 50, 20, Decimal("0.05"), 2),
        ("Platinum", 600000, 100, 50, Decimal("0.10"), 3),
    ]
    for name, min_amount, min_likes, min_posts, rate, position in defaults:
        LoyaltyTier.objects.get_or_create(
            name=name,
            defaults={
                "min_amount": min_amount,
                "min_likes": min_likes,
                "min_posts": min_posts,
                "discount_rate": rate,
                "position": position,
            },
        )


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LoyaltyTier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True, verbose_name="Name")),
                (
                    "min_amount",
                    models.DecimalField(
                        decimal_places=0,
                        default=0,
                        help_text="Total rental spend required to reach this tier.",
                        max_digits=12,
                        verbose_name="Minimum spend",
                    ),
                ),
                ("min_likes", models.PositiveIntegerField(default=0, verbose_name="Minimum likes")),
                ("min_posts", models.PositiveIntegerField(default=0, verbose_name="Minimum posts")),
                (
                    "discount_rate",
                    models.DecimalField(
                        decimal_places=4,
                        default=Decimal("0"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0")),
                            django.core.validators.MaxValueValidator(Decimal("0.9999")),
                        ],
                        verbose_name="Discount rate",
                    ),
                ),
                ("position", models.PositiveSmallIntegerField(default=0, verbose_name="Position")),
            ],
            options={
                "verbose_name": "Loyalty tier",
                "verbose_name_plural": "Loyalty tiers",
                "ordering": ["position", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("discount_rate__gte", 0), ("discount_rate__lt", 1)),
                        name="loyalty_tier_discount_rate_range",
                    )
                ],
            },
        ),
        migrations.RunPython(create_default_tiers, migrations.RunPython.noop),
    ]
