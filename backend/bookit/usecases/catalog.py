from datetime import date
from typing import List, Optional, Sequence, Tuple

from ..domain.errors import ExperienceNotFoundError
from ..domain.repositories import ExperienceRepository, SlotRepository
from ..models import Experience, Slot
from ..utils.time import utc_today


async def list_experiences(exp_repo: ExperienceRepository) -> Sequence[Experience]:
    return await exp_repo.list_all()


async def get_experience_with_slots(
    exp_repo: ExperienceRepository,
    slot_repo: SlotRepository,
    *,
    experience_id: int,
    today: Optional[date] = None,
) -> Tuple[Experience, List[Slot]]:
    """Return the experience and its slots from `today` (UTC) onwards, earliest first."""
    experience = await exp_repo.get(experience_id)
    if experience is None:
        raise ExperienceNotFoundError("experience not found")
    if today is None:
        today = utc_today()
    slots = await slot_repo.list_upcoming(experience_id, today)
    return experience, list(slots)
