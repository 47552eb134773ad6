"""
In-memory repositories implementing the same contracts as the SQLAlchemy ones.

They back unit tests and local experiments without a database. Each mutating
method completes without awaiting, so under asyncio a check and its update
cannot interleave with another task.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List

from ..domain.errors import DuplicateReferenceError
from ..models import Booking, BookingStatus, Experience, PromoCode, Slot
from ..utils.time import utc_now_naive


@dataclass
class InMemoryStore:
    experiences: Dict[int, Experience] = field(default_factory=dict)
    slots: Dict[int, Slot] = field(default_factory=dict)
    promo_codes: Dict[str, PromoCode] = field(default_factory=dict)
    bookings: Dict[str, Booking] = field(default_factory=dict)
    _ids: "itertools.count[int]" = field(default_factory=lambda: itertools.count(1))

    def next_id(self) -> int:
        return next(self._ids)

    def add_experience(self, experience: Experience) -> Experience:
        if experience.id is None:
            experience.id = self.next_id()
        self.experiences[experience.id] = experience
        return experience

    def add_slot(self, slot: Slot) -> Slot:
        if slot.id is None:
            slot.id = self.next_id()
        if slot.booked is None:
            slot.booked = 0
        self.slots[slot.id] = slot
        return slot

    def add_promo_code(self, promo: PromoCode) -> PromoCode:
        promo.code = promo.code.upper()
        self.promo_codes[promo.code] = promo
        return promo


class InMemoryExperienceRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def list_all(self) -> List[Experience]:
        return sorted(
            self.store.experiences.values(),
            key=lambda e: (e.created_at, e.id),
            reverse=True,
        )

    async def get(self, experience_id: int) -> Experience | None:
        return self.store.experiences.get(experience_id)


class InMemorySlotRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get(self, slot_id: int) -> Slot | None:
        return self.store.slots.get(slot_id)

    async def get_for_update(self, slot_id: int) -> Slot | None:
        return self.store.slots.get(slot_id)

    async def list_upcoming(self, experience_id: int, from_date: date) -> List[Slot]:
        slots = [
            slot
            for slot in self.store.slots.values()
            if slot.experience_id == experience_id and slot.date >= from_date
        ]
        return sorted(slots, key=lambda s: (s.date, s.time))

    async def try_reserve(self, slot_id: int, num_guests: int) -> Slot | None:
        slot = self.store.slots.get(slot_id)
        if slot is None or slot.booked + num_guests > slot.capacity:
            return None
        slot.booked += num_guests
        return slot

    async def release(self, slot_id: int, num_guests: int) -> None:
        slot = self.store.slots.get(slot_id)
        if slot is not None and slot.booked >= num_guests:
            slot.booked -= num_guests


class InMemoryPromoCodeRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def get_by_code(self, code: str) -> PromoCode | None:
        return self.store.promo_codes.get(code.strip().upper())


class InMemoryBookingRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

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
        if booking_reference in self.store.bookings:
            raise DuplicateReferenceError(booking_reference)
        booking = Booking(
            id=self.store.next_id(),
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
        self.store.bookings[booking_reference] = booking
        return booking

    async def get_by_reference(self, booking_reference: str) -> Booking | None:
        return self.store.bookings.get(booking_reference.strip().upper())
