from __future__ import annotations

from enum import StrEnum


class BookingError(Exception):
    """Base class for errors raised by the booking domain."""


class InvalidRequestError(BookingError):
    pass


class NotFoundError(BookingError):
    pass


class SlotNotFoundError(NotFoundError):
    pass


class ExperienceNotFoundError(NotFoundError):
    pass


class BookingNotFoundError(NotFoundError):
    pass


class CapacityExceededError(BookingError):
    def __init__(self, remaining: int) -> None:
        self.remaining = max(remaining, 0)
        super().__init__(f"Not enough capacity available: only {self.remaining} spots left")


class PromoErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    BELOW_MINIMUM = "below_minimum"


class InvalidPromoError(BookingError):
    def __init__(self, kind: PromoErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


class DuplicateReferenceError(BookingError):
    """Raised by a booking repository when the reference is already taken."""


class ReferenceGenerationFailedError(BookingError):
    pass


class PersistenceError(BookingError):
    pass
