from enum import StrEnum


class RejectionReason(StrEnum):
    INVALID_SLOT = "invalid_slot"
    INVALID_PARTY_SIZE = "invalid_party_size"
    PAST_DATE = "past_date"
    SLOT_FULL = "slot_full"
    NOT_FOUND = "not_found"
    NOT_OWNER = "not_owner"
    ALREADY_CANCELLED = "already_cancelled"
    UNKNOWN_RESOURCE = "unknown_resource"
    UNAVAILABLE = "unavailable"


class BookingError(Exception):
    """Expected, recoverable booking outcome reported to the caller."""

    reason: RejectionReason


class InvalidSlotError(BookingError):
    reason = RejectionReason.INVALID_SLOT


class InvalidPartySizeError(BookingError):
    reason = RejectionReason.INVALID_PARTY_SIZE


class PastDateError(BookingError):
    reason = RejectionReason.PAST_DATE


class SlotFullError(BookingError):
    reason = RejectionReason.SLOT_FULL


class ReservationNotFoundError(BookingError):
    reason = RejectionReason.NOT_FOUND


class NotOwnerError(BookingError):
    reason = RejectionReason.NOT_OWNER


class AlreadyCancelledError(BookingError):
    reason = RejectionReason.ALREADY_CANCELLED


class UnknownResourceError(BookingError):
    reason = RejectionReason.UNKNOWN_RESOURCE


class UnavailableError(BookingError):
    reason = RejectionReason.UNAVAILABLE


class StoreContentionError(Exception):
    """Transient storage failure (deadlock, lock timeout); safe to retry."""
