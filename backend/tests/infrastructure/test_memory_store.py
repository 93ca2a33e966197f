import asyncio
from datetime import date

import pytest
from tablebook.infrastructure.memory import InMemoryReservationStore
from tablebook.models import ReservationStatus

DAY = date(2026, 10, 20)


@pytest.mark.asyncio
async def test_insert_respects_capacity_per_key() -> None:
    store = InMemoryReservationStore()
    kwargs = {"resource_id": "R1", "reservation_date": DAY, "slot": "18:00", "party_size": 2, "capacity": 1}
    assert await store.insert_if_below_capacity(user_id="a", **kwargs) is not None
    assert await store.insert_if_below_capacity(user_id="b", **kwargs) is None
    other_day = dict(kwargs, reservation_date=date(2026, 10, 21))
    assert await store.insert_if_below_capacity(user_id="b", **other_day) is not None


@pytest.mark.asyncio
async def test_mark_cancelled_only_flips_confirmed_rows() -> None:
    store = InMemoryReservationStore()
    reservation = await store.insert_if_below_capacity(
        resource_id="R1", reservation_date=DAY, slot="18:00", user_id="a", party_size=2, capacity=3
    )
    assert reservation is not None
    cancelled = await store.mark_cancelled(reservation.id)
    assert cancelled is not None and cancelled.status == ReservationStatus.CANCELLED
    assert await store.mark_cancelled(reservation.id) is None
    assert await store.mark_cancelled("missing") is None
    assert await store.list_confirmed("R1", DAY) == []
    assert (await store.get(reservation.id)) is cancelled


@pytest.mark.asyncio
async def test_key_locks_are_released_after_admission() -> None:
    store = InMemoryReservationStore(latency=0.001)
    results = await asyncio.gather(
        *(
            store.insert_if_below_capacity(
                resource_id="R1", reservation_date=DAY, slot=slot, user_id=f"u{i}", party_size=2, capacity=2
            )
            for i in range(6)
            for slot in ("18:00", "18:30")
        )
    )
    assert sum(r is not None for r in results) == 4
    assert store._locks == {}
    assert store._lock_users == {}
