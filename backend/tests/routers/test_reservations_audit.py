from datetime import date
from typing import Any, Callable

import pytest
from fastapi import HTTPException
from tablebook.routers import reservations as router
from tablebook.schemas import ReservationCreate, ReservationRead
from tablebook.usecases.bookings import BookingService

MakeService = Callable[..., BookingService]


@pytest.mark.asyncio
async def test_create_reservation_emits_audit(
    make_service: MakeService, tomorrow: date, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[dict[str, Any]] = []

    def fake_emit(**kwargs: Any) -> None:
        calls.append(kwargs)

    monkeypatch.setattr(router, "emit_audit_log", fake_emit)

    payload = ReservationCreate(resource_id="R1", reservation_date=tomorrow, slot="18:00", party_size=2)
    result: ReservationRead = await router.create_reservation(
        payload=payload,
        service=make_service(),
        user_id="alice",
    )

    assert result.user_id == "alice"
    assert len(calls) == 1
    assert calls[0]["action"] == "reservation.created"
    assert calls[0]["reservation_id"] == result.reservation_id
    assert calls[0]["slot"] == "18:00"


@pytest.mark.asyncio
async def test_rejected_booking_maps_to_409_without_audit(
    make_service: MakeService, tomorrow: date, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))
    service = make_service()
    payload = ReservationCreate(resource_id="R2", reservation_date=tomorrow, slot="12:00", party_size=2)
    await router.create_reservation(payload=payload, service=service, user_id="alice")

    with pytest.raises(HTTPException) as excinfo:
        await router.create_reservation(payload=payload, service=service, user_id="bob")
    assert excinfo.value.status_code == 409
    assert excinfo.value.detail["reason"] == "slot_full"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_cancel_reservation_log_failure_returns_500(
    make_service: MakeService, tomorrow: date, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = make_service()
    reservation = await service.book(
        resource_id="R1", user_id="alice", reservation_date=tomorrow, slot="18:00", party_size=2
    )

    def fake_emit(**kwargs: Any) -> None:
        raise RuntimeError("fail log")

    monkeypatch.setattr(router, "emit_audit_log", fake_emit)

    with pytest.raises(HTTPException) as excinfo:
        await router.cancel_reservation(
            reservation_id=reservation.id,
            service=service,
            user_id="alice",
        )
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_cancel_by_other_user_is_403(make_service: MakeService, tomorrow: date) -> None:
    service = make_service()
    reservation = await service.book(
        resource_id="R1", user_id="alice", reservation_date=tomorrow, slot="18:00", party_size=2
    )
    with pytest.raises(HTTPException) as excinfo:
        await router.cancel_reservation(reservation_id=reservation.id, service=service, user_id="bob")
    assert excinfo.value.status_code == 403
    assert excinfo.value.detail["reason"] == "not_owner"
