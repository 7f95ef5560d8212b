# app/services/booking_service.py
"""
Booking admission & lifecycle.

Admission: a window [start, end) on a space is accepted when the space is not in
maintenance and no live booking (pending | confirmed | active) overlaps it.
Check-and-insert runs under a lock on the space row, so two concurrent requests
for overlapping windows cannot both succeed: the loser sees Conflict.

Lifecycle: pending → confirmed → active → completed, with cancellation from
pending or confirmed. Booking status and the derived space status are written
in the same transaction. A space in maintenance is never moved by a booking.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import store_call, unit_of_work
from app.errors import BookingNotFound, Conflict, NotCancellable, SpaceUnavailable
from app.models.booking import Booking
from app.models.enums import BookingStatus, NotificationType, PaymentStatus, SpaceStatus
from app.models.parking_space import ParkingSpace
from app.services.actor import Actor
from app.services.booking_rules import (
    CANCELLABLE_STATUSES, compute_total_amount, derive_space_status,
    first_conflict, validate_transition, validate_window,
)
from app.services.notification_service import create_notification
from app.services.space_service import get_space, live_bookings
from app.utils.logger import get_logger
from app.utils.qr_token import issue_qr_token

logger = get_logger(__name__)

STATUS_MESSAGES = {
    BookingStatus.CONFIRMED.value: ("Booking confirmed", "Your booking for space {number} is confirmed."),
    BookingStatus.ACTIVE.value: ("Parking started", "Your parking session at space {number} has started."),
    BookingStatus.COMPLETED.value: ("Booking completed", "Thanks for parking at space {number}."),
    BookingStatus.CANCELLED.value: ("Booking cancelled", "Your booking for space {number} was cancelled."),
}


@dataclass
class Availability:
    space_id: str
    start_time: datetime
    end_time: datetime
    available: bool
    conflict: Optional[dict] = None


@dataclass
class StatusChange:
    booking: Booking
    space_status: str
    maintenance_hold: bool = False
    warnings: list = field(default_factory=list)


# ── Admission ────────────────────────────────────────────────────────────────

def _admission_conflict(db: Session, space: ParkingSpace, start: datetime, end: datetime):
    """Return (live bookings on the space, first overlapping one or None)."""
    if space.status == SpaceStatus.MAINTENANCE.value:
        raise SpaceUnavailable(f"Parking space {space.number} is under maintenance")
    live = live_bookings(db, space.id)
    return live, first_conflict(live, start, end)


def check_availability(db: Session, space_id: str, start: datetime, end: datetime) -> Availability:
    start, end = validate_window(start, end)
    space = get_space(db, space_id)
    _, conflict = _admission_conflict(db, space, start, end)
    return Availability(
        space_id=space.id, start_time=start, end_time=end,
        available=conflict is None,
        conflict=conflict.window() if conflict else None,
    )


def create_booking(db: Session, actor: Actor, space_id: str, start: datetime, end: datetime,
                   vehicle_number: Optional[str] = None) -> Booking:
    start, end = validate_window(start, end)
    booking_id = str(uuid.uuid4())

    with unit_of_work(db):
        space = get_space(db, space_id, for_update=True)
        live, conflict = _admission_conflict(db, space, start, end)
        if conflict is not None:
            logger.info(f"[BOOKING] Conflict on {space.number} {start:%Y-%m-%d %H:%M}–{end:%H:%M} "
                        f"with booking {conflict.id}")
            raise Conflict(window=conflict.window())
        # Not available and nothing booked on it: staff took it out of service
        if space.status != SpaceStatus.AVAILABLE.value and not live:
            raise SpaceUnavailable(f"Parking space {space.number} is {space.status}")

        booking = Booking(
            id=booking_id,
            user_id=actor.user_id,
            space_id=space.id,
            start_time=start,
            end_time=end,
            total_amount=compute_total_amount(start, end, space.hourly_rate),
            status=BookingStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            vehicle_number=vehicle_number,
            qr_code=issue_qr_token(booking_id, space.id, start, end),
            created_at=datetime.utcnow(),
        )
        db.add(booking)
        space.status = derive_space_status([b.status for b in live] + [booking.status])

    db.refresh(booking)
    logger.info(f"[BOOKING] Created {booking.id} | User={actor.user_id} | Space={space.number} "
                f"| {start.isoformat()} → {end.isoformat()} | {booking.total_amount}")
    create_notification(db, actor.user_id, NotificationType.BOOKING.value, "Booking created",
                        f"Space {space.number} is reserved from {start:%Y-%m-%d %H:%M} "
                        f"to {end:%Y-%m-%d %H:%M}. Amount due: {booking.total_amount}.")
    return booking


# ── Lifecycle ────────────────────────────────────────────────────────────────

def get_booking(db: Session, actor: Actor, booking_id: str) -> Booking:
    booking = _load(db, booking_id)
    actor.require_owner_or_staff(booking.user_id)
    return booking


def _load(db: Session, booking_id: str, for_update: bool = False) -> Booking:
    q = db.query(Booking).filter(Booking.id == booking_id)
    if for_update:
        q = q.with_for_update()
    with store_call(db):
        booking = q.first()
    if not booking:
        raise BookingNotFound(f"Booking '{booking_id}' not found")
    return booking


def _lock_for_transition(db: Session, actor: Actor, booking_id: str):
    """Lock the space, then the booking. Same order everywhere a booking moves the space."""
    booking = _load(db, booking_id)
    actor.require_owner_or_staff(booking.user_id)
    space = get_space(db, booking.space_id, for_update=True)
    db.refresh(booking, with_for_update=True)
    return booking, space


def _apply_status(db: Session, booking: Booking, space: ParkingSpace, new_status: str) -> StatusChange:
    validate_transition(booking.status, new_status)
    previous = booking.status
    booking.status = new_status
    if new_status == BookingStatus.CANCELLED.value:
        booking.cancelled_at = datetime.utcnow()
    db.flush()

    change = StatusChange(booking=booking, space_status=space.status)
    if space.status == SpaceStatus.MAINTENANCE.value:
        change.maintenance_hold = True
        change.warnings.append(f"Space {space.number} is under maintenance; space status left unchanged")
        logger.warning(f"[BOOKING] {booking.id} {previous} → {new_status} while space "
                       f"{space.number} is in maintenance — space status untouched")
    else:
        space.status = derive_space_status(b.status for b in live_bookings(db, space.id))
        change.space_status = space.status
        logger.info(f"[BOOKING] {booking.id} {previous} → {new_status} | Space={space.number} → {space.status}")
    return change


def _notify_status(db: Session, booking: Booking, space_number: str) -> None:
    title, template = STATUS_MESSAGES[booking.status]
    create_notification(db, booking.user_id, NotificationType.BOOKING.value, title,
                        template.format(number=space_number))


def update_status(db: Session, actor: Actor, booking_id: str, new_status: str) -> StatusChange:
    with unit_of_work(db):
        booking, space = _lock_for_transition(db, actor, booking_id)
        change = _apply_status(db, booking, space, new_status)
    _notify_status(db, change.booking, space.number)
    return change


def update_booking(db: Session, actor: Actor, booking_id: str, status: Optional[str] = None,
                   vehicle_number: Optional[str] = None) -> StatusChange:
    """Optional status transition plus optional vehicle number edit, committed together."""
    with unit_of_work(db):
        booking, space = _lock_for_transition(db, actor, booking_id)
        if status:
            change = _apply_status(db, booking, space, status)
        else:
            change = StatusChange(booking=booking, space_status=space.status)
        if vehicle_number is not None:
            booking.vehicle_number = vehicle_number
    if status:
        _notify_status(db, booking, space.number)
    return change


def cancel_booking(db: Session, actor: Actor, booking_id: str) -> StatusChange:
    with unit_of_work(db):
        booking, space = _lock_for_transition(db, actor, booking_id)
        if booking.status not in CANCELLABLE_STATUSES:
            raise NotCancellable(booking.status)
        change = _apply_status(db, booking, space, BookingStatus.CANCELLED.value)
    _notify_status(db, booking, space.number)
    return change


# ── Reads ────────────────────────────────────────────────────────────────────

def list_user_bookings(db: Session, actor: Actor, status: Optional[str] = None,
                       limit: int = 50, offset: int = 0):
    q = db.query(Booking).filter(Booking.user_id == actor.user_id)
    if status:
        q = q.filter(Booking.status == status)
    with store_call(db):
        return q.order_by(Booking.created_at.desc()).offset(offset).limit(limit).all()


def list_all_bookings(db: Session, actor: Actor, status: Optional[str] = None,
                      space_id: Optional[str] = None, user_id: Optional[str] = None,
                      limit: int = 100, offset: int = 0):
    actor.require_staff()
    q = db.query(Booking)
    if status:
        q = q.filter(Booking.status == status)
    if space_id:
        q = q.filter(Booking.space_id == space_id)
    if user_id:
        q = q.filter(Booking.user_id == user_id)
    with store_call(db):
        return q.order_by(Booking.created_at.desc()).offset(offset).limit(limit).all()
