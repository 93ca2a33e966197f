from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from ..models import Reservation, ReservationStatus
from .errors import InvalidPartySizeError, InvalidSlotError, PastDateError


@dataclass(frozen=True)
class SlotOccupancy:
    occupied: int
    capacity: int

    @property
    def is_open(self) -> bool:
        return self.occupied < self.capacity

    @property
    def remaining(self) -> int:
        return max(self.capacity - self.occupied, 0)


def validate_booking_request(
    slots: Sequence[str],
    *,
    reservation_date: date,
    slot: str,
    party_size: int,
    today: date,
    max_party_size: int | None = None,
) -> None:
    """
    Pure validation of a booking request against the resource's catalog.
    Runs before any capacity check. Raises domain errors.
    """
    if reservation_date < today:
        raise PastDateError(f"{reservation_date.isoformat()} is in the past")
    if slot not in slots:
        raise InvalidSlotError(f"slot {slot!r} is not offered")
    if party_size < 1:
        raise InvalidPartySizeError("party_size must be positive")
    if max_party_size is not None and party_size > max_party_size:
        raise InvalidPartySizeError(f"party_size must be <= {max_party_size}")


def tally_occupancy(slots: Sequence[str], reservations: Iterable[Reservation]) -> dict[str, int]:
    """Count confirmed reservations per catalog slot; unbooked slots map to 0."""
    counts = {slot: 0 for slot in slots}
    for reservation in reservations:
        if reservation.status != ReservationStatus.CONFIRMED:
            continue
        # Rows for slots dropped from the catalog do not open a new bucket.
        if reservation.slot in counts:
            counts[reservation.slot] += 1
    return counts
