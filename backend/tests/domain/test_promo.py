from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from bookit.domain.errors import InvalidPromoError, PromoErrorKind
from bookit.domain.promo import PromoSnapshot, evaluate_promo
from bookit.models import DiscountType, PromoCode

NOW = datetime(2026, 6, 1, 12, 0, 0)


def _promo(
    *,
    code: str = "SAVE10",
    discount_type: DiscountType = DiscountType.PERCENTAGE,
    value: str = "10",
    min_amount: str | None = None,
    max_discount: str | None = None,
    valid_from: datetime = NOW - timedelta(days=30),
    valid_until: datetime = NOW + timedelta(days=30),
    is_active: bool = True,
) -> PromoSnapshot:
    return PromoSnapshot(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        min_amount=None if min_amount is None else Decimal(min_amount),
        max_discount=None if max_discount is None else Decimal(max_discount),
        valid_from=valid_from,
        valid_until=valid_until,
        is_active=is_active,
    )


def _flat100(**kwargs: object) -> PromoSnapshot:
    return _promo(
        code="FLAT100",
        discount_type=DiscountType.FIXED,
        value="100",
        min_amount="200",
        max_discount="100",
        **kwargs,  # type: ignore[arg-type]
    )


def test_unknown_code_is_not_found() -> None:
    result = evaluate_promo(None, amount=100, now=NOW)
    assert result.valid is False
    assert result.error_kind == PromoErrorKind.NOT_FOUND
    assert result.error == "Invalid promo code"
    assert result.discount is None


def test_inactive_code_is_not_found() -> None:
    result = evaluate_promo(_promo(is_active=False), amount=100, now=NOW)
    assert result.error_kind == PromoErrorKind.NOT_FOUND


def test_expired_code_regardless_of_amount() -> None:
    expired = _flat100(valid_until=NOW - timedelta(seconds=1))
    for amount in (50, 150, 5000):
        result = evaluate_promo(expired, amount=amount, now=NOW)
        assert result.valid is False
        assert result.error_kind == PromoErrorKind.EXPIRED
        assert "expired" in (result.error or "")


def test_not_yet_started_code_is_expired() -> None:
    future = _promo(valid_from=NOW + timedelta(days=1))
    result = evaluate_promo(future, amount=100, now=NOW)
    assert result.error_kind == PromoErrorKind.EXPIRED


def test_window_bounds_are_inclusive() -> None:
    promo = _promo(valid_from=NOW, valid_until=NOW)
    assert evaluate_promo(promo, amount=100, now=NOW).valid is True


def test_below_minimum_mentions_threshold() -> None:
    result = evaluate_promo(_flat100(), amount=150, now=NOW)
    assert result.valid is False
    assert result.error_kind == PromoErrorKind.BELOW_MINIMUM
    assert "$200" in (result.error or "")


def test_fractional_threshold_keeps_cents() -> None:
    result = evaluate_promo(_promo(min_amount="49.50"), amount=10, now=NOW)
    assert result.error == "Minimum purchase of $49.50 required"


def test_fixed_code_above_minimum() -> None:
    result = evaluate_promo(_flat100(), amount=Decimal("298.00"), now=NOW)
    assert result.valid is True
    assert result.discount == Decimal("100.00")
    assert result.final_amount == Decimal("198.00")


def test_percentage_code() -> None:
    result = evaluate_promo(_promo(min_amount="50"), amount=Decimal("149.00"), now=NOW)
    assert result.valid is True
    assert result.discount == Decimal("14.90")
    assert result.final_amount == Decimal("134.10")


def test_percentage_code_respects_cap() -> None:
    result = evaluate_promo(_promo(value="50", max_discount="20"), amount=100, now=NOW)
    assert result.discount == Decimal("20.00")
    assert result.final_amount == Decimal("80.00")


def test_rejected_promo_raises_with_kind() -> None:
    result = evaluate_promo(_flat100(), amount=150, now=NOW)
    with pytest.raises(InvalidPromoError) as excinfo:
        result.accepted_rule()
    assert excinfo.value.kind == PromoErrorKind.BELOW_MINIMUM


def test_accepted_promo_yields_its_rule() -> None:
    rule = evaluate_promo(_promo(max_discount="5"), amount=100, now=NOW).accepted_rule()
    assert rule.discount_type == DiscountType.PERCENTAGE
    assert rule.discount_value == Decimal("10")
    assert rule.max_discount == Decimal("5")


def test_missing_promo_raises_not_found() -> None:
    with pytest.raises(InvalidPromoError) as excinfo:
        evaluate_promo(None, amount=100, now=NOW).accepted_rule()
    assert excinfo.value.kind == PromoErrorKind.NOT_FOUND
    assert str(excinfo.value) == "Invalid promo code"


def test_snapshot_from_db() -> None:
    promo = PromoCode(
        code="SAVE10",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10.00"),
        min_amount=Decimal("50.00"),
        max_discount=None,
        valid_from=NOW,
        valid_until=NOW + timedelta(days=1),
        is_active=True,
        created_at=NOW,
    )
    snapshot = PromoSnapshot.from_db(promo)
    assert snapshot.code == "SAVE10"
    assert snapshot.rule.discount_type == DiscountType.PERCENTAGE
    assert snapshot.min_amount == Decimal("50.00")
    assert snapshot.max_discount is None
