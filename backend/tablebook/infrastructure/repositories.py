from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import Select, func, insert, literal, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..domain.errors import StoreContentionError
from ..domain.repositories import ReservationStore
from ..models import Reservation, ReservationStatus, SlotLock, new_reservation_id
from ..utils.time import utc_now_naive

logger = logging.getLogger(__name__)

_INSERT_COLUMNS = (
    "id",
    "resource_id",
    "user_id",
    "reservation_date",
    "slot",
    "party_size",
    "status",
    "created_at",
    "updated_at",
)


class SqlAlchemyReservationStore(ReservationStore):
    """
    Each public call runs in its own transaction so that admission is atomic
    regardless of what the caller's request is doing.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

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
        try:
            await self._ensure_slot_lock(resource_id, reservation_date, slot)
            async with self.session_factory() as session:
                async with session.begin():
                    # Serializes admissions for this key only.
                    await session.scalar(
                        select(SlotLock)
                        .where(
                            SlotLock.resource_id == resource_id,
                            SlotLock.reservation_date == reservation_date,
                            SlotLock.slot == slot,
                        )
                        .with_for_update()
                    )
                    reservation_id = new_reservation_id()
                    now = utc_now_naive()
                    confirmed = (
                        select(func.count(Reservation.id))
                        .where(
                            Reservation.resource_id == resource_id,
                            Reservation.reservation_date == reservation_date,
                            Reservation.slot == slot,
                            Reservation.status == ReservationStatus.CONFIRMED,
                        )
                        .correlate(None)
                        .scalar_subquery()
                    )
                    columns = Reservation.__table__.c
                    values = {
                        "id": reservation_id,
                        "resource_id": resource_id,
                        "user_id": user_id,
                        "reservation_date": reservation_date,
                        "slot": slot,
                        "party_size": party_size,
                        "status": ReservationStatus.CONFIRMED,
                        "created_at": now,
                        "updated_at": now,
                    }
                    source = select(*(literal(values[name], columns[name].type) for name in _INSERT_COLUMNS)).where(
                        confirmed < capacity
                    )
                    result = await session.execute(
                        insert(Reservation.__table__).from_select(list(_INSERT_COLUMNS), source)
                    )
                    if result.rowcount != 1:
                        return None
                    return await session.get(Reservation, reservation_id)
        except OperationalError as exc:
            logger.warning(
                "admission contention resource=%s date=%s slot=%s: %s",
                resource_id,
                reservation_date.isoformat(),
                slot,
                exc.orig,
            )
            raise StoreContentionError("admission aborted by storage contention") from exc

    async def _ensure_slot_lock(self, resource_id: str, reservation_date: date, slot: str) -> None:
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    existing = await session.scalar(
                        select(SlotLock.resource_id).where(
                            SlotLock.resource_id == resource_id,
                            SlotLock.reservation_date == reservation_date,
                            SlotLock.slot == slot,
                        )
                    )
                    if existing is None:
                        session.add(
                            SlotLock(
                                resource_id=resource_id,
                                reservation_date=reservation_date,
                                slot=slot,
                                created_at=utc_now_naive(),
                            )
                        )
            except IntegrityError:
                # A concurrent requester created the row first; it is usable as-is.
                logger.debug("slot lock row already created resource=%s slot=%s", resource_id, slot)

    async def list_confirmed(self, resource_id: str, reservation_date: date) -> List[Reservation]:
        stmt: Select[tuple[Reservation]] = (
            select(Reservation)
            .where(
                Reservation.resource_id == resource_id,
                Reservation.reservation_date == reservation_date,
                Reservation.status == ReservationStatus.CONFIRMED,
            )
            .order_by(Reservation.created_at)
        )
        async with self.session_factory() as session:
            rows = await session.scalars(stmt)
            return list(rows.all())

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        async with self.session_factory() as session:
            return await session.get(Reservation, reservation_id)

    async def mark_cancelled(self, reservation_id: str) -> Optional[Reservation]:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(Reservation)
                        .where(
                            Reservation.id == reservation_id,
                            Reservation.status == ReservationStatus.CONFIRMED,
                        )
                        .values(status=ReservationStatus.CANCELLED, updated_at=utc_now_naive())
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount != 1:
                        return None
                    return await session.get(Reservation, reservation_id)
        except OperationalError as exc:
            raise StoreContentionError("cancellation aborted by storage contention") from exc

    async def list_by_user(self, user_id: str, resource_id: str | None = None) -> List[Reservation]:
        stmt: Select[tuple[Reservation]] = select(Reservation).where(Reservation.user_id == user_id)
        if resource_id is not None:
            stmt = stmt.where(Reservation.resource_id == resource_id)
        stmt = stmt.order_by(Reservation.created_at.desc())
        async with self.session_factory() as session:
            rows = await session.scalars(stmt)
            return list(rows.all())
