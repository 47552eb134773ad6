from typing import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import async_session
from .infrastructure.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyExperienceRepository,
    SqlAlchemyPromoCodeRepository,
    SqlAlchemySlotRepository,
)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


def get_app_settings() -> Settings:
    return get_settings()


async def get_experience_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemyExperienceRepository:
    return SqlAlchemyExperienceRepository(session)


async def get_slot_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemySlotRepository:
    return SqlAlchemySlotRepository(session)


async def get_promo_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemyPromoCodeRepository:
    return SqlAlchemyPromoCodeRepository(session)


async def get_booking_repo(session: AsyncSession = Depends(get_session)) -> SqlAlchemyBookingRepository:
    return SqlAlchemyBookingRepository(session)
