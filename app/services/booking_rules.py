# app/services/booking_rules.py
"""
Pure booking rules — no database access.
Windows are half-open [start, end): a booking ending at 10:00 does not clash
with one starting at 10:00.
"""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.errors import IllegalTransition, InvalidWindow
from app.models.enums import BookingStatus, SpaceStatus

LIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value, BookingStatus.ACTIVE.value)
CANCELLABLE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)

ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING.value: {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value},
    BookingStatus.CONFIRMED.value: {BookingStatus.ACTIVE.value, BookingStatus.CANCELLED.value},
    BookingStatus.ACTIVE.value: {BookingStatus.COMPLETED.value},
    BookingStatus.COMPLETED.value: set(),
    BookingStatus.CANCELLED.value: set(),
}

CENTS = Decimal("0.01")
ONE_HOUR = timedelta(hours=1)


def to_utc_naive(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def validate_window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    start, end = to_utc_naive(start), to_utc_naive(end)
    if start >= end:
        raise InvalidWindow(f"start_time {start.isoformat()} must be before end_time {end.isoformat()}")
    return start, end


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def billable_hours(start: datetime, end: datetime) -> int:
    """Started hours are billed in full: 1.5h → 2h."""
    return math.ceil((end - start) / ONE_HOUR)


def compute_total_amount(start: datetime, end: datetime, hourly_rate) -> Decimal:
    rate = Decimal(str(hourly_rate))
    return (rate * billable_hours(start, end)).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_money(amount) -> Decimal:
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_transition(current: str, target: str) -> None:
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise IllegalTransition(current=current, target=target)


def derive_space_status(live_booking_statuses: Iterable[str]) -> str:
    """
    Space status implied by the live bookings still held on it.
    An active booking wins over reservations; no live booking frees the space.
    """
    statuses = set(live_booking_statuses)
    if BookingStatus.ACTIVE.value in statuses:
        return SpaceStatus.OCCUPIED.value
    if statuses & {BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value}:
        return SpaceStatus.RESERVED.value
    return SpaceStatus.AVAILABLE.value


def first_conflict(bookings: Iterable, start: datetime, end: datetime) -> Optional[object]:
    """Return the first live booking whose window overlaps [start, end), if any."""
    for booking in bookings:
        if booking.status in LIVE_STATUSES and overlaps(booking.start_time, booking.end_time, start, end):
            return booking
    return None
