from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from ..models import Reservation
from .errors import RejectionReason
from .repositories import ReservationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Admitted:
    reservation: Reservation


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    capacity: int


Admission = Admitted | Rejected


class CapacityGuard:
    """
    Authoritative admission control. The occupancy check and the insert run as one
    atomic unit inside the store, scoped to the (resource, date, slot) key.
    """

    def __init__(self, store: ReservationStore) -> None:
        self.store = store

    async def admit(
        self,
        resource_id: str,
        reservation_date: date,
        slot: str,
        capacity: int,
        *,
        user_id: str,
        party_size: int,
    ) -> Admission:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        reservation = await self.store.insert_if_below_capacity(
            resource_id=resource_id,
            reservation_date=reservation_date,
            slot=slot,
            user_id=user_id,
            party_size=party_size,
            capacity=capacity,
        )
        if reservation is None:
            logger.info(
                "slot full resource=%s date=%s slot=%s capacity=%d",
                resource_id,
                reservation_date.isoformat(),
                slot,
                capacity,
            )
            return Rejected(reason=RejectionReason.SLOT_FULL, capacity=capacity)
        logger.debug("admitted reservation=%s slot=%s", reservation.id, slot)
        return Admitted(reservation=reservation)
