from fastapi import HTTPException, status

from ..domain.errors import (
    AlreadyCancelledError,
    BookingError,
    InvalidPartySizeError,
    InvalidSlotError,
    NotOwnerError,
    PastDateError,
    ReservationNotFoundError,
    SlotFullError,
    UnavailableError,
    UnknownResourceError,
)

_STATUS_BY_ERROR: dict[type[BookingError], int] = {
    InvalidSlotError: status.HTTP_400_BAD_REQUEST,
    InvalidPartySizeError: status.HTTP_400_BAD_REQUEST,
    PastDateError: status.HTTP_400_BAD_REQUEST,
    UnknownResourceError: status.HTTP_404_NOT_FOUND,
    ReservationNotFoundError: status.HTTP_404_NOT_FOUND,
    NotOwnerError: status.HTTP_403_FORBIDDEN,
    SlotFullError: status.HTTP_409_CONFLICT,
    AlreadyCancelledError: status.HTTP_409_CONFLICT,
    UnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: BookingError) -> HTTPException:
    status_code = _STATUS_BY_ERROR[type(exc)]
    return HTTPException(status_code=status_code, detail={"reason": exc.reason.value, "message": str(exc)})
