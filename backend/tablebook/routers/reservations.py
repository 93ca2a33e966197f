from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ..deps import get_booking_service, get_current_user_id
from ..domain.errors import BookingError
from ..models import ReservationStatus
from ..schemas import ReservationCreate, ReservationRead
from ..usecases.bookings import BookingService
from ..utils.audit_log import emit_audit_log
from .errors import to_http_exception

router = APIRouter(prefix="", tags=["reservations"])


@router.post("/reservations", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: ReservationCreate,
    service: BookingService = Depends(get_booking_service),
    user_id: str = Depends(get_current_user_id),
) -> ReservationRead:
    try:
        reservation = await service.book(
            resource_id=payload.resource_id,
            user_id=user_id,
            reservation_date=payload.reservation_date,
            slot=payload.slot,
            party_size=payload.party_size,
        )
    except BookingError as exc:
        raise to_http_exception(exc) from exc

    try:
        emit_audit_log(
            action="reservation.created",
            initiator="user",
            reservation_id=reservation.id,
            resource_id=reservation.resource_id,
            user_id=reservation.user_id,
            reservation_date=reservation.reservation_date,
            slot=reservation.slot,
            party_size=reservation.party_size,
            status_from=None,
            status_to=reservation.status,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return ReservationRead.from_db(reservation=reservation)


@router.get("/me/reservations", response_model=List[ReservationRead])
async def list_my_reservations(
    resource_id: Optional[str] = Query(default=None),
    service: BookingService = Depends(get_booking_service),
    user_id: str = Depends(get_current_user_id),
) -> list[ReservationRead]:
    rows = await service.list_user_reservations(user_id=user_id, resource_id=resource_id)
    return [ReservationRead.from_db(reservation=res) for res in rows]


@router.get("/me/reservations/{reservation_id}", response_model=ReservationRead)
async def get_my_reservation(
    reservation_id: str = Path(..., min_length=1),
    service: BookingService = Depends(get_booking_service),
    user_id: str = Depends(get_current_user_id),
) -> ReservationRead:
    try:
        reservation = await service.get_reservation(reservation_id=reservation_id, user_id=user_id)
    except BookingError as exc:
        # Other users' reservations are indistinguishable from missing ones here.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found") from exc
    return ReservationRead.from_db(reservation=reservation)


@router.post("/me/reservations/{reservation_id}/cancel", response_model=ReservationRead)
async def cancel_reservation(
    reservation_id: str = Path(..., min_length=1),
    service: BookingService = Depends(get_booking_service),
    user_id: str = Depends(get_current_user_id),
) -> ReservationRead:
    try:
        updated = await service.cancel(reservation_id=reservation_id, requesting_user_id=user_id)
    except BookingError as exc:
        raise to_http_exception(exc) from exc

    try:
        emit_audit_log(
            action="reservation.cancelled",
            initiator="user",
            reservation_id=updated.id,
            resource_id=updated.resource_id,
            user_id=updated.user_id,
            reservation_date=updated.reservation_date,
            slot=updated.slot,
            party_size=updated.party_size,
            status_from=ReservationStatus.CONFIRMED,
            status_to=updated.status,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return ReservationRead.from_db(reservation=updated)
