from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query

from ..config import get_slot_catalog
from ..deps import get_booking_service
from ..domain.catalog import SlotCatalog
from ..domain.errors import BookingError
from ..schemas import ResourceSlotsRead, SlotAvailabilityRead
from ..usecases.bookings import BookingService
from .errors import to_http_exception

router = APIRouter(prefix="/resources", tags=["availability"])


@router.get("/{resource_id}/slots", response_model=ResourceSlotsRead)
async def list_slots(
    resource_id: str,
    catalog: SlotCatalog = Depends(get_slot_catalog),
) -> ResourceSlotsRead:
    try:
        slots = catalog.slots_for(resource_id)
        capacity = catalog.capacity_for(resource_id)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    return ResourceSlotsRead(resource_id=resource_id, slots=list(slots), capacity=capacity)


@router.get("/{resource_id}/availability", response_model=List[SlotAvailabilityRead])
async def get_availability(
    resource_id: str,
    reservation_date: date = Query(..., alias="date", description="Calendar date (YYYY-MM-DD)"),
    service: BookingService = Depends(get_booking_service),
) -> list[SlotAvailabilityRead]:
    try:
        occupancy = await service.availability(resource_id, reservation_date)
    except BookingError as exc:
        raise to_http_exception(exc) from exc
    return [SlotAvailabilityRead.from_occupancy(slot=slot, occupancy=entry) for slot, entry in occupancy.items()]
