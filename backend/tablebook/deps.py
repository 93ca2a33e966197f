from functools import partial

from fastapi import Depends, Header, HTTPException, status

from .config import Settings, get_settings, get_slot_catalog
from .database import async_session
from .domain.catalog import SlotCatalog
from .infrastructure.repositories import SqlAlchemyReservationStore
from .usecases.bookings import BookingService
from .utils.auth import decode_access_token
from .utils.time import local_today


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    if authorization is None:
        raise _unauthorized("Authorization header required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Bearer token required")
    try:
        return decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise _unauthorized("invalid token") from exc


def get_reservation_store() -> SqlAlchemyReservationStore:
    return SqlAlchemyReservationStore(async_session)


def get_booking_service(
    store: SqlAlchemyReservationStore = Depends(get_reservation_store),
    catalog: SlotCatalog = Depends(get_slot_catalog),
    settings: Settings = Depends(get_settings),
) -> BookingService:
    return BookingService(
        store,
        catalog,
        today=partial(local_today, settings.timezone),
        max_party_size=settings.max_party_size,
        max_attempts=settings.booking_max_attempts,
        retry_backoff=settings.booking_retry_backoff,
    )
