from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..deps import get_experience_repo, get_slot_repo
from ..domain.errors import ExperienceNotFoundError
from ..domain.repositories import ExperienceRepository, SlotRepository
from ..schemas import ExperienceDetail, ExperienceRead
from ..usecases import catalog as catalog_usecase

router = APIRouter(prefix="/experiences", tags=["experiences"])


@router.get("", response_model=List[ExperienceRead])
async def list_experiences(
    exp_repo: ExperienceRepository = Depends(get_experience_repo),
) -> list[ExperienceRead]:
    rows = await catalog_usecase.list_experiences(exp_repo)
    return [ExperienceRead.from_db(experience=experience) for experience in rows]


@router.get("/{experience_id}", response_model=ExperienceDetail)
async def get_experience(
    experience_id: int = Path(..., ge=1),
    exp_repo: ExperienceRepository = Depends(get_experience_repo),
    slot_repo: SlotRepository = Depends(get_slot_repo),
) -> ExperienceDetail:
    try:
        experience, slots = await catalog_usecase.get_experience_with_slots(
            exp_repo,
            slot_repo,
            experience_id=experience_id,
        )
    except ExperienceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="experience not found")
    return ExperienceDetail.from_db_with_slots(experience=experience, slots=slots)
