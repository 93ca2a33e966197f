from datetime import date

from .catalog import SlotCatalog
from .errors import InvalidSlotError
from .repositories import ReservationStore
from .services import tally_occupancy


class AvailabilityIndex:
    """
    Occupancy per slot for a (resource, date), derived from live reservation rows on
    every call. Results are advisory; admission never relies on them.
    """

    def __init__(self, store: ReservationStore, catalog: SlotCatalog) -> None:
        self.store = store
        self.catalog = catalog

    async def occupancy(self, resource_id: str, reservation_date: date) -> dict[str, int]:
        slots = self.catalog.slots_for(resource_id)
        reservations = await self.store.list_confirmed(resource_id, reservation_date)
        return tally_occupancy(slots, reservations)

    async def is_available(self, resource_id: str, reservation_date: date, slot: str, capacity: int) -> bool:
        counts = await self.occupancy(resource_id, reservation_date)
        if slot not in counts:
            raise InvalidSlotError(f"slot {slot!r} is not offered")
        return counts[slot] < capacity
