# app/services/space_service.py
"""
Space directory: lookup, filtered listing and staff/admin management of parking spaces.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.database import store_call, unit_of_work
from app.errors import DuplicateSpaceNumber, Forbidden, SpaceInUse, SpaceNotFound
from app.models.booking import Booking
from app.models.enums import SpaceStatus
from app.models.parking_space import ParkingSpace
from app.services.actor import Actor
from app.services.booking_rules import LIVE_STATUSES, derive_space_status, validate_window
from app.utils.logger import get_logger

logger = get_logger(__name__)

STATUS_ONLY_FIELDS = {"status"}


def get_space(db: Session, space_id: str, for_update: bool = False) -> ParkingSpace:
    q = db.query(ParkingSpace).filter(ParkingSpace.id == space_id)
    if for_update:
        q = q.with_for_update()
    with store_call(db):
        space = q.first()
    if not space:
        raise SpaceNotFound(f"Parking space '{space_id}' not found")
    return space


def list_spaces(db: Session, floor: Optional[int] = None, section: Optional[str] = None,
                type: Optional[str] = None, status: Optional[str] = None,
                available: Optional[bool] = None):
    q = db.query(ParkingSpace)
    if floor is not None:
        q = q.filter(ParkingSpace.floor == floor)
    if section:
        q = q.filter(ParkingSpace.section == section)
    if type:
        q = q.filter(ParkingSpace.type == type)
    if status:
        q = q.filter(ParkingSpace.status == status)
    if available:
        q = q.filter(ParkingSpace.status == SpaceStatus.AVAILABLE.value)
    with store_call(db):
        return q.order_by(ParkingSpace.floor, ParkingSpace.section, ParkingSpace.number).all()


def live_bookings(db: Session, space_id: str, start: Optional[datetime] = None,
                  end: Optional[datetime] = None):
    """Live bookings on a space, optionally only those overlapping [start, end)."""
    q = db.query(Booking).filter(Booking.space_id == space_id, Booking.status.in_(LIVE_STATUSES))
    if start is not None and end is not None:
        q = q.filter(Booking.start_time < end, Booking.end_time > start)
    with store_call(db):
        return q.order_by(Booking.start_time).all()


def space_bookings_in_range(db: Session, space_id: str, start: datetime, end: datetime):
    """Windows of live bookings that overlap the requested range."""
    start, end = validate_window(start, end)
    get_space(db, space_id)
    return [b.window() for b in live_bookings(db, space_id, start, end)]


def create_space(db: Session, actor: Actor, number: str, floor: int, section: str,
                 type: str, hourly_rate, position: dict) -> ParkingSpace:
    actor.require_admin()
    with unit_of_work(db):
        if db.query(ParkingSpace.id).filter(ParkingSpace.number == number).first():
            raise DuplicateSpaceNumber(f"Parking space number '{number}' already exists")
        space = ParkingSpace(number=number, floor=floor, section=section, type=type,
                             status=SpaceStatus.AVAILABLE.value, hourly_rate=hourly_rate,
                             position=position)
        db.add(space)
    db.refresh(space)
    logger.info(f"[SPACE] Created {space.number} (floor {space.floor}, {space.type}) by {actor.user_id}")
    return space


def update_space(db: Session, actor: Actor, space_id: str, changes: dict) -> ParkingSpace:
    """
    Admins may change any attribute. Staff may only change `status`,
    which is how spaces enter and leave maintenance.

    Outside maintenance, a space holding live bookings keeps the status those
    bookings imply; a requested status only sticks on a space with none.
    """
    changes = {k: v for k, v in changes.items() if v is not None}
    if not actor.is_admin and not (actor.is_staff and set(changes) <= STATUS_ONLY_FIELDS):
        raise Forbidden("Only admins can edit space attributes")

    with unit_of_work(db):
        space = get_space(db, space_id, for_update=True)
        number = changes.get("number")
        if number and number != space.number:
            if db.query(ParkingSpace.id).filter(ParkingSpace.number == number).first():
                raise DuplicateSpaceNumber(f"Parking space number '{number}' already exists")
        for field, value in changes.items():
            setattr(space, field, value)
        if space.status != SpaceStatus.MAINTENANCE.value:
            live = live_bookings(db, space.id)
            if live:
                space.status = derive_space_status(b.status for b in live)
    db.refresh(space)

    if "status" in changes:
        logger.info(f"[SPACE] {space.number} status set to {space.status} by {actor.role} {actor.user_id}")
    return space


def delete_space(db: Session, actor: Actor, space_id: str) -> None:
    actor.require_admin()
    with unit_of_work(db):
        space = get_space(db, space_id, for_update=True)
        if live_bookings(db, space_id):
            raise SpaceInUse("Cannot delete space with active bookings")
        db.delete(space)
    logger.info(f"[SPACE] Deleted {space_id} by {actor.user_id}")
