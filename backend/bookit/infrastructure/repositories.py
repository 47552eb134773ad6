from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, List, cast

from sqlalchemy import Select, func, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.errors import DuplicateReferenceError, PersistenceError
from ..domain.repositories import BookingRepository, ExperienceRepository, PromoCodeRepository, SlotRepository
from ..models import Booking, BookingStatus, Experience, PromoCode, Slot
from ..utils.time import utc_now_naive

_REFERENCE_CONSTRAINT_MARKERS = ("uq_bookings_reference", "bookings.booking_reference")


def _is_reference_conflict(exc: IntegrityError) -> bool:
    constraint = getattr(getattr(exc.orig, "diag", None), "constraint_name", None)
    if constraint == "uq_bookings_reference":
        return True
    message = str(exc.orig)
    return any(marker in message for marker in _REFERENCE_CONSTRAINT_MARKERS)


class SqlAlchemyExperienceRepository(ExperienceRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_all(self) -> List[Experience]:
        stmt: Select[tuple[Experience]] = select(Experience).order_by(
            Experience.created_at.desc(),
            Experience.id.desc(),
        )
        return list((await self.session.scalars(stmt)).all())

    async def get(self, experience_id: int) -> Experience | None:
        return await self.session.get(Experience, experience_id)


class SqlAlchemySlotRepository(SlotRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, slot_id: int) -> Slot | None:
        # Always re-read: `booked` may have moved since the identity map loaded it.
        return await self.session.get(Slot, slot_id, populate_existing=True)

    async def get_for_update(self, slot_id: int) -> Slot | None:
        stmt: Select[tuple[Slot]] = (
            select(Slot).where(Slot.id == slot_id).with_for_update().execution_options(populate_existing=True)
        )
        return await self.session.scalar(stmt)

    async def list_upcoming(self, experience_id: int, from_date: date) -> List[Slot]:
        stmt: Select[tuple[Slot]] = (
            select(Slot)
            .where(Slot.experience_id == experience_id, Slot.date >= from_date)
            .order_by(Slot.date.asc(), Slot.time.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def try_reserve(self, slot_id: int, num_guests: int) -> Slot | None:
        stmt = (
            update(Slot)
            .where(Slot.id == slot_id, Slot.booked + num_guests <= Slot.capacity)
            .values(booked=Slot.booked + num_guests)
            .execution_options(synchronize_session=False)
        )
        result = cast("CursorResult[Any]", await self.session.execute(stmt))
        if result.rowcount != 1:
            return None
        return await self.get(slot_id)

    async def release(self, slot_id: int, num_guests: int) -> None:
        stmt = (
            update(Slot)
            .where(Slot.id == slot_id, Slot.booked >= num_guests)
            .values(booked=Slot.booked - num_guests)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)


class SqlAlchemyPromoCodeRepository(PromoCodeRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_code(self, code: str) -> PromoCode | None:
        stmt: Select[tuple[PromoCode]] = select(PromoCode).where(
            func.upper(PromoCode.code) == code.strip().upper()
        )
        return await self.session.scalar(stmt)


class SqlAlchemyBookingRepository(BookingRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        *,
        experience_id: int,
        slot_id: int,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        num_guests: int,
        base_amount: Decimal,
        discount_amount: Decimal,
        final_amount: Decimal,
        promo_code: str | None,
        status: BookingStatus,
        booking_reference: str,
    ) -> Booking:
        booking = Booking(
            experience_id=experience_id,
            slot_id=slot_id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            num_guests=num_guests,
            base_amount=base_amount,
            discount_amount=discount_amount,
            final_amount=final_amount,
            promo_code=promo_code,
            status=status,
            booking_reference=booking_reference,
            created_at=utc_now_naive(),
        )
        # Savepoint so a reference collision does not poison the outer transaction.
        try:
            async with self.session.begin_nested():
                self.session.add(booking)
                await self.session.flush()
        except IntegrityError as exc:
            if _is_reference_conflict(exc):
                raise DuplicateReferenceError(booking_reference) from exc
            raise PersistenceError("booking violates a store constraint") from exc
        return booking

    async def get_by_reference(self, booking_reference: str) -> Booking | None:
        stmt: Select[tuple[Booking]] = select(Booking).where(
            Booking.booking_reference == booking_reference.strip().upper()
        )
        return await self.session.scalar(stmt)
