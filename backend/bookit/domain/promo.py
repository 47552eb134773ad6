from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..models import DiscountType, PromoCode
from .errors import InvalidPromoError, PromoErrorKind
from .pricing import DiscountRule, Money, compute_discount, to_money

INVALID_CODE_MESSAGE = "Invalid promo code"


@dataclass(frozen=True)
class PromoSnapshot:
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    min_amount: Optional[Decimal]
    max_discount: Optional[Decimal]
    valid_from: datetime
    valid_until: datetime
    is_active: bool

    @classmethod
    def from_db(cls, promo: PromoCode) -> "PromoSnapshot":
        return cls(
            code=promo.code,
            discount_type=DiscountType(promo.discount_type),
            discount_value=Decimal(promo.discount_value),
            min_amount=None if promo.min_amount is None else Decimal(promo.min_amount),
            max_discount=None if promo.max_discount is None else Decimal(promo.max_discount),
            valid_from=promo.valid_from,
            valid_until=promo.valid_until,
            is_active=promo.is_active,
        )

    @property
    def rule(self) -> DiscountRule:
        return DiscountRule(
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            max_discount=self.max_discount,
        )


@dataclass(frozen=True)
class PromoValidation:
    valid: bool
    discount: Optional[Decimal] = None
    final_amount: Optional[Decimal] = None
    error_kind: Optional[PromoErrorKind] = None
    error: Optional[str] = None
    rule: Optional[DiscountRule] = None

    def accepted_rule(self) -> DiscountRule:
        """Return the discount rule of a valid promo, raise InvalidPromoError otherwise."""
        if self.valid and self.rule is not None:
            return self.rule
        raise InvalidPromoError(self.error_kind or PromoErrorKind.NOT_FOUND, self.error or INVALID_CODE_MESSAGE)


def _format_threshold(amount: Decimal) -> str:
    # 200.00 -> "200", 49.50 -> "49.50"
    if amount == amount.to_integral_value():
        return f"{amount:.0f}"
    return f"{amount:.2f}"


def _rejected(kind: PromoErrorKind, message: str) -> PromoValidation:
    return PromoValidation(valid=False, error_kind=kind, error=message)


def evaluate_promo(promo: Optional[PromoSnapshot], *, amount: Money, now: datetime) -> PromoValidation:
    """
    Check a promo against an amount at a point in time.

    Checks run in order and stop at the first failure: existence/active flag,
    validity window, minimum purchase. A passing promo yields its discount and
    the resulting final amount.
    """
    if promo is None or not promo.is_active:
        return _rejected(PromoErrorKind.NOT_FOUND, INVALID_CODE_MESSAGE)
    if now < promo.valid_from or now > promo.valid_until:
        return _rejected(PromoErrorKind.EXPIRED, "Promo code has expired")

    base_amount = to_money(amount)
    if promo.min_amount is not None and base_amount < promo.min_amount:
        return _rejected(
            PromoErrorKind.BELOW_MINIMUM,
            f"Minimum purchase of ${_format_threshold(promo.min_amount)} required",
        )

    discount = compute_discount(base_amount, promo.rule)
    return PromoValidation(valid=True, discount=discount, final_amount=base_amount - discount, rule=promo.rule)
