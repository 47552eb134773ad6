from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from bookit.domain.errors import PromoErrorKind
from bookit.infrastructure.memory import InMemoryPromoCodeRepository, InMemoryStore
from bookit.models import DiscountType, PromoCode
from bookit.usecases import promos as uc

NOW = datetime(2026, 6, 1, 12, 0, 0)


def _repo() -> InMemoryPromoCodeRepository:
    store = InMemoryStore()
    store.add_promo_code(
        PromoCode(
            code="FLAT100",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("100.00"),
            min_amount=Decimal("200.00"),
            max_discount=Decimal("100.00"),
            valid_from=NOW - timedelta(days=1),
            valid_until=NOW + timedelta(days=1),
            is_active=True,
            created_at=NOW,
        )
    )
    return InMemoryPromoCodeRepository(store)


@pytest.mark.asyncio
async def test_lookup_is_case_insensitive() -> None:
    result = await uc.validate_promo(_repo(), code="flat100", amount=Decimal("250"), now=NOW)
    assert result.valid is True
    assert result.discount == Decimal("100.00")
    assert result.final_amount == Decimal("150.00")


@pytest.mark.asyncio
async def test_below_minimum_from_store() -> None:
    result = await uc.validate_promo(_repo(), code="FLAT100", amount=150, now=NOW)
    assert result.valid is False
    assert result.error_kind == PromoErrorKind.BELOW_MINIMUM
    assert "$200" in (result.error or "")


@pytest.mark.asyncio
async def test_unknown_code() -> None:
    result = await uc.validate_promo(_repo(), code="NOPE", amount=150, now=NOW)
    assert result.error_kind == PromoErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_expired_when_now_after_window() -> None:
    result = await uc.validate_promo(_repo(), code="FLAT100", amount=500, now=NOW + timedelta(days=2))
    assert result.error_kind == PromoErrorKind.EXPIRED


@pytest.mark.asyncio
async def test_aware_timestamps_are_compared_in_utc() -> None:
    # 2026-06-03 08:00 in UTC+9 is 2026-06-02 23:00 UTC, past the window end at 06-02 12:00
    aware = datetime(2026, 6, 3, 8, 0, tzinfo=timezone(timedelta(hours=9)))
    result = await uc.validate_promo(_repo(), code="FLAT100", amount=500, now=aware)
    assert result.error_kind == PromoErrorKind.EXPIRED

    inside = datetime(2026, 6, 2, 20, 0, tzinfo=timezone(timedelta(hours=9)))
    result = await uc.validate_promo(_repo(), code="FLAT100", amount=500, now=inside)
    assert result.valid is True
