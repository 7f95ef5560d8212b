# app/errors.py
"""
Reservation error taxonomy.
Every failure the booking engine reports is a ReservationError subclass with a
stable `kind`, an HTTP status for the API layer, and whether an automatic retry
(with backoff) is reasonable. None of them is process-fatal.
"""

from typing import Any, Optional


class ReservationError(Exception):
    kind = "ReservationError"
    status_code = 400
    retryable = False

    def __init__(self, detail: str = "", **extra: Any):
        super().__init__(detail or self.kind)
        self.detail = detail or self.kind
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"error": self.kind, "detail": self.detail}
        body.update(self.extra)
        return body


# ── Admission ────────────────────────────────────────────────────────────────
class InvalidWindow(ReservationError):
    kind = "InvalidWindow"


class SpaceNotFound(ReservationError):
    kind = "SpaceNotFound"
    status_code = 404


class SpaceUnavailable(ReservationError):
    kind = "SpaceUnavailable"


class Conflict(ReservationError):
    kind = "Conflict"
    status_code = 409
    retryable = True

    def __init__(self, detail: str = "", window: Optional[dict] = None):
        super().__init__(detail or "Time slot is already booked", conflict=window)
        self.window = window


# ── Lifecycle ────────────────────────────────────────────────────────────────
class BookingNotFound(ReservationError):
    kind = "BookingNotFound"
    status_code = 404


class IllegalTransition(ReservationError):
    kind = "IllegalTransition"
    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move booking from {current} to {target}",
                         current=current, target=target)
        self.current = current
        self.target = target


class NotCancellable(ReservationError):
    kind = "NotCancellable"

    def __init__(self, status: str):
        super().__init__(f"Booking in status '{status}' cannot be cancelled", status=status)


class Forbidden(ReservationError):
    kind = "Forbidden"
    status_code = 403


# ── Payments ─────────────────────────────────────────────────────────────────
class AmountMismatch(ReservationError):
    kind = "AmountMismatch"


class AlreadyPaid(ReservationError):
    kind = "AlreadyPaid"


class PaymentNotFound(ReservationError):
    kind = "PaymentNotFound"
    status_code = 404


class NotRefundable(ReservationError):
    kind = "NotRefundable"


# ── Space directory ──────────────────────────────────────────────────────────
class DuplicateSpaceNumber(ReservationError):
    kind = "DuplicateSpaceNumber"
    status_code = 409


class SpaceInUse(ReservationError):
    kind = "SpaceInUse"
    status_code = 409


# ── Misc ─────────────────────────────────────────────────────────────────────
class NotificationNotFound(ReservationError):
    kind = "NotificationNotFound"
    status_code = 404


class InvalidQrToken(ReservationError):
    kind = "InvalidQrToken"


class StoreTimeout(ReservationError):
    kind = "StoreTimeout"
    status_code = 503
    retryable = True
