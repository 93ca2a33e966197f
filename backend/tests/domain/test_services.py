from datetime import date, datetime

import pytest
from tablebook.domain.errors import InvalidPartySizeError, InvalidSlotError, PastDateError
from tablebook.domain.services import SlotOccupancy, tally_occupancy, validate_booking_request
from tablebook.models import Reservation, ReservationStatus

TODAY = date(2026, 10, 18)
SLOTS = ("18:00", "18:30")


def _reservation(slot: str, status: ReservationStatus = ReservationStatus.CONFIRMED) -> Reservation:
    now = datetime(2026, 10, 18, 9, 0)
    return Reservation(
        id=f"res-{slot}-{status.value}",
        resource_id="R1",
        user_id="u1",
        reservation_date=TODAY,
        slot=slot,
        party_size=2,
        status=status,
        created_at=now,
        updated_at=now,
    )


def test_rejects_past_date() -> None:
    with pytest.raises(PastDateError):
        validate_booking_request(SLOTS, reservation_date=date(2026, 10, 17), slot="18:00", party_size=2, today=TODAY)


def test_today_is_bookable() -> None:
    validate_booking_request(SLOTS, reservation_date=TODAY, slot="18:00", party_size=2, today=TODAY)


def test_rejects_slot_outside_catalog() -> None:
    with pytest.raises(InvalidSlotError):
        validate_booking_request(SLOTS, reservation_date=TODAY, slot="18:15", party_size=2, today=TODAY)


@pytest.mark.parametrize("party_size", [0, -1])
def test_rejects_non_positive_party_size(party_size: int) -> None:
    with pytest.raises(InvalidPartySizeError):
        validate_booking_request(SLOTS, reservation_date=TODAY, slot="18:00", party_size=party_size, today=TODAY)


def test_rejects_party_above_maximum() -> None:
    with pytest.raises(InvalidPartySizeError):
        validate_booking_request(
            SLOTS, reservation_date=TODAY, slot="18:00", party_size=9, today=TODAY, max_party_size=8
        )


def test_tally_counts_confirmed_only_and_keeps_empty_slots() -> None:
    rows = [
        _reservation("18:00"),
        _reservation("18:00", ReservationStatus.CANCELLED),
        _reservation("19:00"),
    ]
    assert tally_occupancy(SLOTS, rows) == {"18:00": 1, "18:30": 0}


def test_slot_occupancy_projection() -> None:
    full = SlotOccupancy(occupied=3, capacity=3)
    assert full.is_open is False
    assert full.remaining == 0
    partial = SlotOccupancy(occupied=1, capacity=3)
    assert partial.is_open is True
    assert partial.remaining == 2
