import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from .domain.promo import PromoValidation
from .models import Booking, BookingStatus, Experience, Slot


class ExperienceRead(BaseModel):
    id: int
    title: str
    description: str
    image_url: str
    location: str
    duration: str
    price: Decimal
    rating: Decimal
    total_reviews: int
    category: str
    highlights: List[str]
    included: List[str]

    @field_serializer("price", "rating", when_used="json")
    def _ser_decimal(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_db(cls, *, experience: Experience) -> "ExperienceRead":
        return cls(
            id=experience.id,
            title=experience.title,
            description=experience.description,
            image_url=experience.image_url,
            location=experience.location,
            duration=experience.duration,
            price=experience.price,
            rating=experience.rating,
            total_reviews=experience.total_reviews,
            category=experience.category,
            highlights=list(experience.highlights or []),
            included=list(experience.included or []),
        )


class SlotRead(BaseModel):
    id: int
    experience_id: int
    date: dt.date
    time: dt.time
    capacity: int
    booked: int
    remaining: int
    price_modifier: Optional[Decimal]

    @field_serializer("price_modifier", when_used="json")
    def _ser_modifier(self, value: Optional[Decimal]) -> Optional[float]:
        return None if value is None else float(value)

    @classmethod
    def from_db(cls, *, slot: Slot) -> "SlotRead":
        return cls(
            id=slot.id,
            experience_id=slot.experience_id,
            date=slot.date,
            time=slot.time,
            capacity=slot.capacity,
            booked=slot.booked,
            remaining=slot.remaining,
            price_modifier=slot.price_modifier,
        )


class ExperienceDetail(ExperienceRead):
    slots: List[SlotRead]

    @classmethod
    def from_db_with_slots(cls, *, experience: Experience, slots: List[Slot]) -> "ExperienceDetail":
        base = ExperienceRead.from_db(experience=experience)
        return cls(**base.model_dump(), slots=[SlotRead.from_db(slot=s) for s in slots])


class PromoValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    amount: Decimal = Field(gt=0)


class PromoValidationRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    valid: bool
    discount: Optional[Decimal] = None
    final_amount: Optional[Decimal] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @field_serializer("discount", "final_amount", when_used="json")
    def _ser_money(self, value: Optional[Decimal]) -> Optional[float]:
        return None if value is None else float(value)

    @classmethod
    def from_validation(cls, validation: PromoValidation) -> "PromoValidationRead":
        return cls(
            valid=validation.valid,
            discount=validation.discount,
            final_amount=validation.final_amount,
            error=validation.error,
            error_kind=None if validation.error_kind is None else validation.error_kind.value,
        )


class BookingCreate(BaseModel):
    """Checkout payload. Monetary fields sent by the client are accepted and ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    experience_id: int = Field(ge=1)
    slot_id: int = Field(ge=1)
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: str = Field(min_length=3, max_length=255)
    customer_phone: str = Field(min_length=1, max_length=50)
    num_guests: int = Field(ge=1)
    promo_code: Optional[str] = Field(default=None, max_length=64)
    base_amount: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    final_amount: Optional[Decimal] = None


class BookingRead(BaseModel):
    id: int
    experience_id: int
    slot_id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    num_guests: int
    base_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    promo_code: Optional[str]
    status: BookingStatus
    booking_reference: str
    created_at: dt.datetime

    @field_serializer("base_amount", "discount_amount", "final_amount", when_used="json")
    def _ser_money(self, value: Decimal) -> float:
        return float(value)

    @field_serializer("created_at", when_used="json")
    def _ser_datetime(self, value: dt.datetime) -> str:
        return value.replace(tzinfo=dt.timezone.utc).isoformat()

    @classmethod
    def from_db(cls, *, booking: Booking) -> "BookingRead":
        return cls(
            id=booking.id,
            experience_id=booking.experience_id,
            slot_id=booking.slot_id,
            customer_name=booking.customer_name,
            customer_email=booking.customer_email,
            customer_phone=booking.customer_phone,
            num_guests=booking.num_guests,
            base_amount=booking.base_amount,
            discount_amount=booking.discount_amount,
            final_amount=booking.final_amount,
            promo_code=booking.promo_code,
            status=booking.status,
            booking_reference=booking.booking_reference,
            created_at=booking.created_at,
        )
