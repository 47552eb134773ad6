import asyncio
import datetime as dt
import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import async_session, create_schema
from .models import DiscountType, Experience, PromoCode, Slot
from .utils.time import utc_now_naive, utc_today

logger = logging.getLogger(__name__)

SLOT_DAYS = 14
# (time of day, capacity)
DAILY_SLOTS = (
    (dt.time(9, 0), 10),
    (dt.time(14, 0), 10),
    (dt.time(18, 0), 8),
)

SAMPLE_EXPERIENCES = (
    {
        "title": "Sunset Sailing Adventure",
        "description": "Watch the sun go down over the bay aboard a sailing yacht with a small group.",
        "image_url": "https://images.pexels.com/photos/1117210/pexels-photo-1117210.jpeg",
        "location": "San Diego Bay, California",
        "duration": "3 hours",
        "price": Decimal("149.00"),
        "rating": Decimal("4.8"),
        "total_reviews": 342,
        "category": "Adventure",
        "highlights": ["Sunset views", "Professional crew", "Small group", "Refreshments"],
        "included": ["Yacht rental", "Captain", "Safety equipment", "Drinks and snacks"],
    },
    {
        "title": "Cultural Heritage Walking Tour",
        "description": "Historic landmarks and hidden local spots of the old town with a local guide.",
        "image_url": "https://images.pexels.com/photos/2901209/pexels-photo-2901209.jpeg",
        "location": "Boston Historic District, Massachusetts",
        "duration": "2.5 hours",
        "price": Decimal("79.00"),
        "rating": Decimal("4.7"),
        "total_reviews": 891,
        "category": "Cultural",
        "highlights": ["Historic landmarks", "Local guide", "Small group"],
        "included": ["Guide", "Entrance fees", "Map and brochure"],
    },
    {
        "title": "Wine Country Tour",
        "description": "Three wineries, guided tastings and a paired lunch in the heart of wine country.",
        "image_url": "https://images.pexels.com/photos/1395967/pexels-photo-1395967.jpeg",
        "location": "Napa Valley, California",
        "duration": "Full day (7 hours)",
        "price": Decimal("249.00"),
        "rating": Decimal("4.9"),
        "total_reviews": 678,
        "category": "Culinary",
        "highlights": ["3 winery visits", "Vineyard tours", "Gourmet lunch"],
        "included": ["Transportation", "Tastings", "Lunch with wine pairing"],
    },
)


def sample_promo_codes(now: dt.datetime) -> list[PromoCode]:
    valid_until = dt.datetime(now.year + 1, 12, 31, 23, 59, 59)
    return [
        PromoCode(
            code="SAVE10",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal("10.00"),
            min_amount=Decimal("50.00"),
            max_discount=None,
            valid_from=now,
            valid_until=valid_until,
            is_active=True,
            created_at=now,
        ),
        PromoCode(
            code="FLAT100",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("100.00"),
            min_amount=Decimal("200.00"),
            max_discount=Decimal("100.00"),
            valid_from=now,
            valid_until=valid_until,
            is_active=True,
            created_at=now,
        ),
    ]


async def seed(session: AsyncSession) -> None:
    now = utc_now_naive()
    today = utc_today()
    if not await session.scalar(select(func.count(Experience.id))):
        for data in SAMPLE_EXPERIENCES:
            experience = Experience(**data, created_at=now, updated_at=now)
            experience.slots = [
                Slot(date=today + dt.timedelta(days=offset), time=at, capacity=capacity, booked=0, created_at=now)
                for offset in range(SLOT_DAYS)
                for at, capacity in DAILY_SLOTS
            ]
            session.add(experience)
    if not await session.scalar(select(func.count(PromoCode.id))):
        session.add_all(sample_promo_codes(now))
    await session.commit()


async def main() -> None:
    await create_schema()
    async with async_session() as session:
        await seed(session)
    logger.info("seed data created")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
