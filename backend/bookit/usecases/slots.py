from ..domain.errors import CapacityExceededError, SlotNotFoundError
from ..domain.repositories import SlotRepository
from ..domain.services import SlotSnapshot, check_admission
from ..models import Slot


async def reserve_capacity(
    slot_repo: SlotRepository,
    *,
    slot_id: int,
    num_guests: int,
) -> Slot:
    slot = await slot_repo.get(slot_id)
    if slot is None:
        raise SlotNotFoundError("slot not found")

    # Fast rejection on the snapshot; the conditional update below is what actually guards capacity.
    check_admission(SlotSnapshot(capacity=slot.capacity, booked=slot.booked), num_guests=num_guests)

    reserved = await slot_repo.try_reserve(slot_id, num_guests)
    if reserved is None:
        # A plain read may come from the transaction snapshot; the locking read sees what the update saw.
        current = await slot_repo.get_for_update(slot_id)
        if current is None:
            raise SlotNotFoundError("slot not found")
        raise CapacityExceededError(current.capacity - current.booked)
    return reserved
