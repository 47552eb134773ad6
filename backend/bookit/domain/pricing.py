from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..models import DiscountType

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Money = Union[Decimal, int, str, float]


def to_money(value: Money) -> Decimal:
    """Convert to a Decimal rounded to cents. Floats go through str() to avoid binary noise."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DiscountRule:
    discount_type: DiscountType
    discount_value: Decimal
    max_discount: Optional[Decimal] = None


@dataclass(frozen=True)
class PriceBreakdown:
    base_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal


def compute_discount(base_amount: Decimal, rule: DiscountRule) -> Decimal:
    if rule.discount_type == DiscountType.PERCENTAGE:
        discount = to_money(base_amount * Decimal(rule.discount_value) / Decimal(100))
        if rule.max_discount is not None:
            discount = min(discount, to_money(rule.max_discount))
    else:
        discount = to_money(rule.discount_value)
    # Never let the final amount go below zero.
    return max(min(discount, base_amount), ZERO)


def compute_price(
    per_guest_price: Money,
    num_guests: int,
    rule: Optional[DiscountRule] = None,
) -> PriceBreakdown:
    """
    Pure pricing: base = price * guests, minus an optional discount clamped to the base.
    All amounts are Decimals rounded to cents.
    """
    if num_guests < 1:
        raise ValueError("num_guests must be >= 1")
    price = to_money(per_guest_price)
    if price < 0:
        raise ValueError("price must not be negative")

    base_amount = to_money(price * num_guests)
    discount_amount = ZERO if rule is None else compute_discount(base_amount, rule)
    return PriceBreakdown(
        base_amount=base_amount,
        discount_amount=discount_amount,
        final_amount=base_amount - discount_amount,
    )
