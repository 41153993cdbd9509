"""Fixtures shared by the app test suites."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from apps.fleet.models import Activity, Equipment, RentalVehicle
from apps.loyalty.models import LoyaltyTier
from apps.users.models import User


@pytest.fixture
def loyalty_tiers(db):
    LoyaltyTier.objects.all().delete()
    return {
        "Bronze": LoyaltyTier.objects.create(name="Bronze", discount_rate=Decimal("0"), position=0),
        "Silver": LoyaltyTier.objects.create(name="Silver", discount_rate=Decimal("0.05"), position=1),
        "Gold": LoyaltyTier.objects.create(name="Gold", discount_rate=Decimal("0.10"), position=2),
    }


@pytest.fixture
def customer(db, loyalty_tiers):
    return User.objects.create_user(
        email="customer@example.com",
        password="CustomerPass123",
        first_name="Haruto",
        last_name="Sato",
    )


@pytest.fixture
def gold_customer(db, loyalty_tiers):
    return User.objects.create_user(
        email="gold@example.com",
        password="GoldPass123",
        loyalty_tier="Gold",
    )


@pytest.fixture
def staff_user(db):
    return User.objects.create_staff(email="staff@example.com", password="StaffPass123")


@pytest.fixture
def vehicle(db):
    return RentalVehicle.objects.create(
        name="Hiace Camper",
        vehicle_type="Van",
        license_plate="品川 300 あ 12-34",
        daily_rate=Decimal("10000"),
        location="Tokyo",
    )


@pytest.fixture
def second_vehicle(db):
    return RentalVehicle.objects.create(
        name="Kei Camper",
        vehicle_type="Kei",
        daily_rate=Decimal("8000"),
        location="Tokyo",
    )


@pytest.fixture
def bike_rack(db):
    return Equipment.objects.create(
        name="Bike rack",
        category="Outdoor",
        price_per_day=Decimal("500"),
        pricing_type=Equipment.PricingType.PER_DAY,
    )


@pytest.fixture
def gas_canister(db):
    return Equipment.objects.create(
        name="Gas canister",
        category="Cooking",
        price_per_day=Decimal("300"),
        pricing_type=Equipment.PricingType.PER_UNIT,
    )


@pytest.fixture
def kayak_tour(db):
    return Activity.objects.create(
        name="Kayak tour",
        price=Decimal("4000"),
        location="Lake Motosu",
        start_date=date(2025, 7, 1),
        end_date=date(2025, 8, 31),
        max_participants=6,
    )
