from dataclasses import dataclass

from .errors import CapacityExceededError, InvalidRequestError


@dataclass(frozen=True)
class SlotSnapshot:
    capacity: int
    booked: int

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.booked, 0)


def check_admission(snapshot: SlotSnapshot, *, num_guests: int) -> int:
    """
    Pure admission test: booked + num_guests must not exceed capacity.
    Returns remaining capacity after admitting the guests. Raises domain errors otherwise.
    """
    if num_guests <= 0:
        raise InvalidRequestError("num_guests must be positive")
    if snapshot.booked + num_guests > snapshot.capacity:
        raise CapacityExceededError(snapshot.remaining)
    return snapshot.capacity - snapshot.booked - num_guests
