import asyncio
import logging
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings
from ..deps import get_app_settings, get_booking_repo, get_session
from ..domain.errors import (
    BookingNotFoundError,
    CapacityExceededError,
    InvalidPromoError,
    InvalidRequestError,
    NotFoundError,
    PersistenceError,
    ReferenceGenerationFailedError,
)
from ..domain.repositories import BookingRepository
from ..infrastructure.repositories import (
    SqlAlchemyBookingRepository,
    SqlAlchemyExperienceRepository,
    SqlAlchemyPromoCodeRepository,
    SqlAlchemySlotRepository,
)
from ..schemas import BookingCreate, BookingRead
from ..usecases import bookings as booking_usecase
from ..utils.audit_log import emit_audit_log

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

RETRY_LATER = "booking could not be completed, please try again"


def _reject(payload: BookingCreate, status_code: int, detail: Any, reason: str) -> NoReturn:
    emit_audit_log(
        action="booking.rejected",
        booking_id=None,
        booking_reference=None,
        experience_id=payload.experience_id,
        slot_id=payload.slot_id,
        num_guests=payload.num_guests,
        promo_code=payload.promo_code,
        message=reason,
    )
    raise HTTPException(status_code=status_code, detail=detail)


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> BookingRead:
    exp_repo = SqlAlchemyExperienceRepository(session)
    slot_repo = SqlAlchemySlotRepository(session)
    promo_repo = SqlAlchemyPromoCodeRepository(session)
    booking_repo = SqlAlchemyBookingRepository(session)
    # base/discount/final amounts from the client are never forwarded.
    request = booking_usecase.BookingRequest(
        experience_id=payload.experience_id,
        slot_id=payload.slot_id,
        customer_name=payload.customer_name,
        customer_email=payload.customer_email,
        customer_phone=payload.customer_phone,
        num_guests=payload.num_guests,
        promo_code=payload.promo_code,
    )
    try:
        async with asyncio.timeout(settings.booking_timeout_seconds):
            async with session.begin():
                booking = await booking_usecase.create_booking(
                    exp_repo,
                    slot_repo,
                    promo_repo,
                    booking_repo,
                    request=request,
                    max_reference_attempts=settings.reference_max_attempts,
                )
                emit_audit_log(
                    action="booking.created",
                    booking_id=booking.id,
                    booking_reference=booking.booking_reference,
                    experience_id=booking.experience_id,
                    slot_id=booking.slot_id,
                    num_guests=booking.num_guests,
                    final_amount=booking.final_amount,
                    promo_code=booking.promo_code,
                    status=booking.status,
                )
    except InvalidRequestError as exc:
        _reject(payload, status.HTTP_400_BAD_REQUEST, str(exc), "invalid_request")
    except NotFoundError as exc:
        _reject(payload, status.HTTP_404_NOT_FOUND, str(exc), "not_found")
    except CapacityExceededError as exc:
        _reject(payload, status.HTTP_409_CONFLICT, str(exc), "capacity_exceeded")
    except InvalidPromoError as exc:
        _reject(
            payload,
            status.HTTP_400_BAD_REQUEST,
            {"message": str(exc), "reason": exc.kind.value},
            f"promo_{exc.kind.value}",
        )
    except ReferenceGenerationFailedError:
        logger.error("booking reference allocation exhausted for slot %s", payload.slot_id)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=RETRY_LATER)
    except (PersistenceError, SQLAlchemyError):
        logger.exception("failed to persist booking for slot %s", payload.slot_id)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=RETRY_LATER)
    except TimeoutError:
        logger.warning("booking for slot %s timed out after %ss", payload.slot_id, settings.booking_timeout_seconds)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=RETRY_LATER)
    except RuntimeError:
        # audit write failed inside the transaction, so the booking was rolled back
        logger.exception("audit log failed for slot %s", payload.slot_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed")

    return BookingRead.from_db(booking=booking)


@router.get("/{reference}", response_model=BookingRead)
async def get_booking(
    reference: str = Path(..., min_length=1, max_length=16),
    booking_repo: BookingRepository = Depends(get_booking_repo),
) -> BookingRead:
    try:
        booking = await booking_usecase.get_booking(booking_repo, reference=reference)
    except BookingNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="booking not found")
    return BookingRead.from_db(booking=booking)
