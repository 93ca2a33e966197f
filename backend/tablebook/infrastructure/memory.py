from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Dict, List, Optional, Tuple

from ..domain.repositories import ReservationStore
from ..models import Reservation, ReservationStatus, new_reservation_id
from ..utils.time import utc_now_naive

SlotKey = Tuple[str, date, str]


class InMemoryReservationStore(ReservationStore):
    """
    Process-local store for a single event loop. Admission is serialized per
    (resource, date, slot) key with an asyncio.Lock; disjoint keys never wait on
    each other. A key's lock is dropped once no coroutine holds or awaits it, so
    the lock map only tracks keys with bookings in flight. `latency` simulates
    storage round trips between read and write.
    """

    def __init__(self, *, latency: float = 0.0) -> None:
        self.latency = latency
        self._rows: Dict[str, Reservation] = {}
        self._locks: Dict[SlotKey, asyncio.Lock] = {}
        self._lock_users: Dict[SlotKey, int] = {}

    async def _roundtrip(self) -> None:
        await asyncio.sleep(self.latency)

    @asynccontextmanager
    async def _key_lock(self, key: SlotKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    def _confirmed_count(self, key: SlotKey) -> int:
        resource_id, reservation_date, slot = key
        return sum(
            1
            for row in self._rows.values()
            if row.resource_id == resource_id
            and row.reservation_date == reservation_date
            and row.slot == slot
            and row.status == ReservationStatus.CONFIRMED
        )

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
        key = (resource_id, reservation_date, slot)
        async with self._key_lock(key):
            occupied = self._confirmed_count(key)
            await self._roundtrip()
            if occupied >= capacity:
                return None
            now = utc_now_naive()
            reservation = Reservation(
                id=new_reservation_id(),
                resource_id=resource_id,
                user_id=user_id,
                reservation_date=reservation_date,
                slot=slot,
                party_size=party_size,
                status=ReservationStatus.CONFIRMED,
                created_at=now,
                updated_at=now,
            )
            self._rows[reservation.id] = reservation
            return reservation

    async def list_confirmed(self, resource_id: str, reservation_date: date) -> List[Reservation]:
        await self._roundtrip()
        rows = [
            row
            for row in self._rows.values()
            if row.resource_id == resource_id
            and row.reservation_date == reservation_date
            and row.status == ReservationStatus.CONFIRMED
        ]
        return sorted(rows, key=lambda row: row.created_at)

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        await self._roundtrip()
        return self._rows.get(reservation_id)

    async def mark_cancelled(self, reservation_id: str) -> Optional[Reservation]:
        row = self._rows.get(reservation_id)
        # No await between the status check and the flip.
        if row is None or row.status != ReservationStatus.CONFIRMED:
            return None
        row.status = ReservationStatus.CANCELLED
        row.updated_at = utc_now_naive()
        return row

    async def list_by_user(self, user_id: str, resource_id: str | None = None) -> List[Reservation]:
        await self._roundtrip()
        # Walk newest insertions first so equal timestamps still list newest first.
        rows = [
            row
            for row in reversed(list(self._rows.values()))
            if row.user_id == user_id and (resource_id is None or row.resource_id == resource_id)
        ]
        return sorted(rows, key=lambda row: row.created_at, reverse=True)
