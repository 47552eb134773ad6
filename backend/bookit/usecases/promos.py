from datetime import datetime
from typing import Optional

from ..domain.pricing import Money
from ..domain.promo import PromoSnapshot, PromoValidation, evaluate_promo
from ..domain.repositories import PromoCodeRepository
from ..utils.time import to_utc_naive, utc_now_naive


async def validate_promo(
    promo_repo: PromoCodeRepository,
    *,
    code: str,
    amount: Money,
    now: Optional[datetime] = None,
) -> PromoValidation:
    promo = await promo_repo.get_by_code(code)
    snapshot = None if promo is None else PromoSnapshot.from_db(promo)
    now = utc_now_naive() if now is None else to_utc_naive(now)
    return evaluate_promo(snapshot, amount=amount, now=now)
