import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from ..domain.errors import (
    BookingNotFoundError,
    DuplicateReferenceError,
    ExperienceNotFoundError,
    InvalidRequestError,
    ReferenceGenerationFailedError,
    SlotNotFoundError,
)
from ..domain.pricing import PriceBreakdown, compute_price
from ..domain.promo import PromoSnapshot, evaluate_promo
from ..domain.references import generate_booking_reference, is_booking_reference
from ..domain.repositories import BookingRepository, ExperienceRepository, PromoCodeRepository, SlotRepository
from ..models import Booking, BookingStatus, Experience
from ..utils.time import to_utc_naive, utc_now_naive
from .slots import reserve_capacity

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_ATTEMPTS = 5


@dataclass(frozen=True)
class BookingRequest:
    experience_id: int
    slot_id: int
    customer_name: str
    customer_email: str
    customer_phone: str
    num_guests: int
    promo_code: Optional[str] = None


def validate_booking_request(request: BookingRequest) -> BookingRequest:
    """Check required fields and return a normalized copy (trimmed text, upper-cased promo code)."""
    missing = [
        name
        for name, value in (
            ("customer_name", request.customer_name),
            ("customer_email", request.customer_email),
            ("customer_phone", request.customer_phone),
        )
        if value is None or not value.strip()
    ]
    if missing:
        raise InvalidRequestError(f"Missing required fields: {', '.join(missing)}")
    if not request.experience_id or request.experience_id < 1:
        raise InvalidRequestError("experience_id is required")
    if not request.slot_id or request.slot_id < 1:
        raise InvalidRequestError("slot_id is required")
    if request.num_guests is None or request.num_guests < 1:
        raise InvalidRequestError("num_guests must be at least 1")

    email = request.customer_email.strip()
    local, _, domain = email.partition("@")
    if not local or not domain:
        raise InvalidRequestError("customer_email is not a valid email address")

    promo_code = (request.promo_code or "").strip().upper() or None
    return replace(
        request,
        customer_name=request.customer_name.strip(),
        customer_email=email,
        customer_phone=request.customer_phone.strip(),
        promo_code=promo_code,
    )


async def create_booking(
    exp_repo: ExperienceRepository,
    slot_repo: SlotRepository,
    promo_repo: PromoCodeRepository,
    booking_repo: BookingRepository,
    *,
    request: BookingRequest,
    now: Optional[datetime] = None,
    max_reference_attempts: int = DEFAULT_REFERENCE_ATTEMPTS,
    generate_reference: Callable[[], str] = generate_booking_reference,
) -> Booking:
    req = validate_booking_request(request)

    slot = await slot_repo.get(req.slot_id)
    if slot is None:
        raise SlotNotFoundError("slot not found")
    experience = await exp_repo.get(req.experience_id)
    if experience is None:
        raise ExperienceNotFoundError("experience not found")
    if slot.experience_id != experience.id:
        raise InvalidRequestError("slot does not belong to this experience")

    await reserve_capacity(slot_repo, slot_id=req.slot_id, num_guests=req.num_guests)
    try:
        price = await _price(promo_repo, experience=experience, request=req, now=now)
        return await _persist(
            booking_repo,
            request=req,
            price=price,
            max_attempts=max_reference_attempts,
            generate_reference=generate_reference,
        )
    except Exception:
        # Give the seats back; the surrounding transaction (if any) rolls back as well.
        await slot_repo.release(req.slot_id, req.num_guests)
        raise


async def _price(
    promo_repo: PromoCodeRepository,
    *,
    experience: Experience,
    request: BookingRequest,
    now: Optional[datetime],
) -> PriceBreakdown:
    if request.promo_code is None:
        return compute_price(experience.price, request.num_guests)

    base_amount = compute_price(experience.price, request.num_guests).base_amount
    promo = await promo_repo.get_by_code(request.promo_code)
    snapshot = None if promo is None else PromoSnapshot.from_db(promo)
    now = utc_now_naive() if now is None else to_utc_naive(now)
    rule = evaluate_promo(snapshot, amount=base_amount, now=now).accepted_rule()
    return compute_price(experience.price, request.num_guests, rule)


async def _persist(
    booking_repo: BookingRepository,
    *,
    request: BookingRequest,
    price: PriceBreakdown,
    max_attempts: int,
    generate_reference: Callable[[], str],
) -> Booking:
    for attempt in range(1, max_attempts + 1):
        reference = generate_reference()
        try:
            return await booking_repo.create(
                experience_id=request.experience_id,
                slot_id=request.slot_id,
                customer_name=request.customer_name,
                customer_email=request.customer_email,
                customer_phone=request.customer_phone,
                num_guests=request.num_guests,
                base_amount=price.base_amount,
                discount_amount=price.discount_amount,
                final_amount=price.final_amount,
                promo_code=request.promo_code,
                status=BookingStatus.CONFIRMED,
                booking_reference=reference,
            )
        except DuplicateReferenceError:
            logger.warning("booking reference collision (attempt %d/%d)", attempt, max_attempts)
    raise ReferenceGenerationFailedError(f"could not allocate a unique booking reference after {max_attempts} attempts")


async def get_booking(booking_repo: BookingRepository, *, reference: str) -> Booking:
    normalized = reference.strip().upper()
    if not is_booking_reference(normalized):
        raise BookingNotFoundError("booking not found")
    booking = await booking_repo.get_by_reference(normalized)
    if booking is None:
        raise BookingNotFoundError("booking not found")
    return booking
