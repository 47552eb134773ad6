from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, Sequence

from ..models import Booking, BookingStatus, Experience, PromoCode, Slot


class ExperienceRepository(Protocol):
    async def list_all(self) -> Sequence[Experience]: ...

    async def get(self, experience_id: int) -> Experience | None: ...


class SlotRepository(Protocol):
    async def get(self, slot_id: int) -> Slot | None: ...

    async def get_for_update(self, slot_id: int) -> Slot | None:
        """Read the latest committed row, locking it for the rest of the transaction."""
        ...

    async def list_upcoming(self, experience_id: int, from_date: date) -> Sequence[Slot]: ...

    async def try_reserve(self, slot_id: int, num_guests: int) -> Slot | None:
        """Atomically add num_guests to booked if it still fits; None when it does not."""
        ...

    async def release(self, slot_id: int, num_guests: int) -> None: ...


class PromoCodeRepository(Protocol):
    async def get_by_code(self, code: str) -> PromoCode | None: ...


class BookingRepository(Protocol):
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
        """Persist a booking. Raises DuplicateReferenceError if the reference is taken."""
        ...

    async def get_by_reference(self, booking_reference: str) -> Booking | None: ...
