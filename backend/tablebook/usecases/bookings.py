from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, TypeVar

from ..domain.availability import AvailabilityIndex
from ..domain.catalog import SlotCatalog
from ..domain.errors import (
    AlreadyCancelledError,
    NotOwnerError,
    ReservationNotFoundError,
    SlotFullError,
    StoreContentionError,
    UnavailableError,
)
from ..domain.guard import Admitted, CapacityGuard
from ..domain.repositories import ReservationStore
from ..domain.services import SlotOccupancy, validate_booking_request
from ..models import Reservation, ReservationStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BookingService:
    """
    Booking and cancellation lifecycle for time-slot reservations.

    Every failure is raised as a `BookingError` subclass. Transient storage failures are
    retried a bounded number of times; each attempt re-runs the full atomic admission.
    """

    def __init__(
        self,
        store: ReservationStore,
        catalog: SlotCatalog,
        *,
        today: Callable[[], date],
        max_party_size: int | None = None,
        max_attempts: int = 3,
        retry_backoff: float = 0.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.store = store
        self.catalog = catalog
        self.index = AvailabilityIndex(store, catalog)
        self.guard = CapacityGuard(store)
        self.today = today
        self.max_party_size = max_party_size
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

    async def book(
        self,
        *,
        resource_id: str,
        user_id: str,
        reservation_date: date,
        slot: str,
        party_size: int,
    ) -> Reservation:
        slots = self.catalog.slots_for(resource_id)
        validate_booking_request(
            slots,
            reservation_date=reservation_date,
            slot=slot,
            party_size=party_size,
            today=self.today(),
            max_party_size=self.max_party_size,
        )
        capacity = self.catalog.capacity_for(resource_id)

        outcome = await self._with_retries(
            "book",
            lambda: self.guard.admit(
                resource_id,
                reservation_date,
                slot,
                capacity,
                user_id=user_id,
                party_size=party_size,
            ),
        )
        if not isinstance(outcome, Admitted):
            raise SlotFullError(f"slot {slot} on {reservation_date.isoformat()} is full ({capacity}/{capacity})")
        logger.info(
            "booked reservation=%s resource=%s date=%s slot=%s party_size=%d",
            outcome.reservation.id,
            resource_id,
            reservation_date.isoformat(),
            slot,
            party_size,
        )
        return outcome.reservation

    async def cancel(self, *, reservation_id: str, requesting_user_id: str) -> Reservation:
        reservation = await self.store.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError("reservation not found")
        if reservation.user_id != requesting_user_id:
            raise NotOwnerError("reservation belongs to another user")
        if reservation.status == ReservationStatus.CANCELLED:
            raise AlreadyCancelledError("reservation is already cancelled")

        updated = await self._with_retries("cancel", lambda: self.store.mark_cancelled(reservation_id))
        if updated is None:
            # A concurrent cancel flipped the row between our read and the conditional update.
            raise AlreadyCancelledError("reservation is already cancelled")
        logger.info("cancelled reservation=%s slot=%s", updated.id, updated.slot)
        return updated

    async def availability(self, resource_id: str, reservation_date: date) -> dict[str, SlotOccupancy]:
        capacity = self.catalog.capacity_for(resource_id)
        counts = await self.index.occupancy(resource_id, reservation_date)
        return {slot: SlotOccupancy(occupied=occupied, capacity=capacity) for slot, occupied in counts.items()}

    async def list_user_reservations(self, *, user_id: str, resource_id: str | None = None) -> list[Reservation]:
        return await self.store.list_by_user(user_id, resource_id)

    async def get_reservation(self, *, reservation_id: str, user_id: str) -> Reservation:
        reservation = await self.store.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError("reservation not found")
        if reservation.user_id != user_id:
            raise NotOwnerError("reservation belongs to another user")
        return reservation

    async def _with_retries(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        attempt = 1
        while True:
            try:
                return await call()
            except StoreContentionError as exc:
                logger.warning("%s attempt %d/%d hit storage contention: %s", operation, attempt, self.max_attempts, exc)
                if attempt >= self.max_attempts:
                    raise UnavailableError(f"{operation} failed after {attempt} attempts") from exc
            if self.retry_backoff:
                await asyncio.sleep(self.retry_backoff * attempt)
            attempt += 1
