from fastapi import APIRouter, Depends

from ..deps import get_promo_repo
from ..domain.repositories import PromoCodeRepository
from ..schemas import PromoValidateRequest, PromoValidationRead
from ..usecases import promos as promo_usecase

router = APIRouter(prefix="", tags=["promos"])


@router.post("/promo-validate", response_model=PromoValidationRead, response_model_exclude_none=True)
async def validate_promo(
    payload: PromoValidateRequest,
    promo_repo: PromoCodeRepository = Depends(get_promo_repo),
) -> PromoValidationRead:
    # Advisory only: checkout re-validates against the server-side amount.
    validation = await promo_usecase.validate_promo(promo_repo, code=payload.code, amount=payload.amount)
    return PromoValidationRead.from_validation(validation)
