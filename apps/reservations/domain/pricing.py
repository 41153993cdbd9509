"""
Reservation pricing

Pure arithmetic over Decimals, no database access. The loyalty discount
applies to the vehicle rental total only; equipment and activities are
never discounted. Tax is charged on the discounted subtotal. Every amount
is rounded down to the currency unit (whole yen by default).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from typing import List, Sequence

PER_DAY = "per_day"
PER_UNIT = "per_unit"

ZERO = Decimal("0")
ONE_UNIT = Decimal("1")


def floor_amount(amount: Decimal, quantum: Decimal = ONE_UNIT) -> Decimal:
    return Decimal(amount).quantize(quantum, rounding=ROUND_FLOOR)


@dataclass(frozen=True)
class EquipmentLine:
    equipment_id: int
    price: Decimal
    quantity: int
    pricing_type: str = PER_DAY


@dataclass(frozen=True)
class ActivityLine:
    activity_id: int
    price: Decimal
    participants: int


@dataclass(frozen=True)
class PricedLine:
    item_id: int
    unit_price: Decimal
    quantity: int
    subtotal: Decimal


@dataclass(frozen=True)
class PriceBreakdown:
    days: int
    daily_rate: Decimal
    vehicle_total: Decimal
    equipment_total: Decimal
    activities_total: Decimal
    subtotal: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    equipment_lines: List[PricedLine] = field(default_factory=list)
    activity_lines: List[PricedLine] = field(default_factory=list)

    @property
    def subtotal_after_discount(self) -> Decimal:
        return self.subtotal - self.discount_amount


def equipment_line_total(line: EquipmentLine, days: int) -> Decimal:
    """``price × quantity × days`` for per-day items, ``price × quantity`` otherwise."""
    amount = Decimal(line.price) * line.quantity
    if line.pricing_type == PER_UNIT:
        return amount
    return amount * days


def calculate_price(
    *,
    daily_rate: Decimal,
    days: int,
    discount_rate: Decimal = ZERO,
    tax_rate: Decimal = ZERO,
    equipment: Sequence[EquipmentLine] = (),
    activities: Sequence[ActivityLine] = (),
    quantum: Decimal = ONE_UNIT,
) -> PriceBreakdown:
    """
    Price a reservation

    Example (Gold tier, 10 %):
        daily_rate=10000, days=1, discount_rate=0.10, tax_rate=0.10
        subtotal 10000, discount 1000, tax 900, total 9900
    """
    if days < 1:
        raise ValueError("A rental lasts at least one day")
    discount_rate = Decimal(discount_rate)
    if discount_rate < 0 or discount_rate >= 1:
        raise ValueError(f"Discount rate {discount_rate} is outside [0, 1)")

    vehicle_total = floor_amount(Decimal(daily_rate) * days, quantum)

    equipment_lines = [
        PricedLine(
            item_id=line.equipment_id,
            unit_price=Decimal(line.price),
            quantity=line.quantity,
            subtotal=floor_amount(equipment_line_total(line, days), quantum),
        )
        for line in equipment
    ]
    activity_lines = [
        PricedLine(
            item_id=line.activity_id,
            unit_price=Decimal(line.price),
            quantity=line.participants,
            subtotal=floor_amount(Decimal(line.price) * line.participants, quantum),
        )
        for line in activities
    ]

    equipment_total = sum((line.subtotal for line in equipment_lines), ZERO)
    activities_total = sum((line.subtotal for line in activity_lines), ZERO)
    subtotal = vehicle_total + equipment_total + activities_total

    discount_amount = floor_amount(vehicle_total * discount_rate, quantum)
    tax = floor_amount((subtotal - discount_amount) * Decimal(tax_rate), quantum)
    total = subtotal - discount_amount + tax

    return PriceBreakdown(
        days=days,
        daily_rate=Decimal(daily_rate),
        vehicle_total=vehicle_total,
        equipment_total=equipment_total,
        activities_total=activities_total,
        subtotal=subtotal,
        discount_rate=discount_rate,
        discount_amount=discount_amount,
        tax_rate=Decimal(tax_rate),
        tax=tax,
        total=total,
        equipment_lines=equipment_lines,
        activity_lines=activity_lines,
    )
