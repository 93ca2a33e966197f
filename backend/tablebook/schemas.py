from datetime import date, datetime

from pydantic import BaseModel, Field

from .domain.services import SlotOccupancy
from .models import Reservation, ReservationStatus


class ResourceSlotsRead(BaseModel):
    resource_id: str
    slots: list[str]
    capacity: int


class SlotAvailabilityRead(BaseModel):
    slot: str
    occupied: int
    capacity: int
    remaining: int
    is_open: bool

    @classmethod
    def from_occupancy(cls, *, slot: str, occupancy: SlotOccupancy) -> "SlotAvailabilityRead":
        return cls(
            slot=slot,
            occupied=occupancy.occupied,
            capacity=occupancy.capacity,
            remaining=occupancy.remaining,
            is_open=occupancy.is_open,
        )


class ReservationCreate(BaseModel):
    resource_id: str = Field(min_length=1, max_length=64)
    reservation_date: date
    slot: str
    # Range checks are reported by the booking service as invalid_party_size.
    party_size: int


class ReservationRead(BaseModel):
    reservation_id: str
    resource_id: str
    user_id: str
    reservation_date: date
    slot: str
    party_size: int
    status: ReservationStatus
    created_at: datetime

    @classmethod
    def from_db(cls, *, reservation: Reservation) -> "ReservationRead":
        return cls(
            reservation_id=reservation.id,
            resource_id=reservation.resource_id,
            user_id=reservation.user_id,
            reservation_date=reservation.reservation_date,
            slot=reservation.slot,
            party_size=reservation.party_size,
            status=reservation.status,
            created_at=reservation.created_at,
        )
