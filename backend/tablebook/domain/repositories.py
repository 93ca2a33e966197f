from __future__ import annotations

from datetime import date
from typing import Protocol

from ..models import Reservation


class ReservationStore(Protocol):
    async def insert_if_below_capacity(
        self,
        *,
        resource_id: str,
        reservation_date: date,
        slot: str,
        user_id: str,
        party_size: int,
        capacity: int,
    ) -> Reservation | None:
        """
        Atomically count confirmed reservations for (resource_id, reservation_date, slot)
        and insert a confirmed one only if that count is below `capacity`.
        Returns None when the slot is full. Raises StoreContentionError on transient failures.
        """
        ...

    async def list_confirmed(self, resource_id: str, reservation_date: date) -> list[Reservation]: ...

    async def get(self, reservation_id: str) -> Reservation | None: ...

    async def mark_cancelled(self, reservation_id: str) -> Reservation | None:
        """Flip confirmed -> cancelled. Returns None if the row was not confirmed."""
        ...

    async def list_by_user(self, user_id: str, resource_id: str | None = None) -> list[Reservation]: ...
