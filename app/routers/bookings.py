# app/routers/bookings.py
"""
Bookings — create, read, update status, cancel, QR render/verify.
Every call runs as the Actor attached by the upstream gateway.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.config import settings
from app.database import get_db
from app.dependencies import get_actor
from app.models.enums import BookingStatus
from app.schemas.booking import (
    BookingCreate, BookingOut, BookingStatusOut, BookingUpdate,
    QrImageOut, QrVerifyOut, QrVerifyRequest,
)
from app.services import booking_service
from app.services.actor import Actor
from app.utils.qr_token import render_qr_data_url, verify_qr_token

router = APIRouter()


def _status_out(change: booking_service.StatusChange) -> dict:
    return {
        "booking": change.booking,
        "space_status": change.space_status,
        "maintenance_hold": change.maintenance_hold,
        "warnings": change.warnings,
    }


@router.get("/bookings", response_model=list[BookingOut], summary="Caller's bookings")
def my_bookings(booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
                limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0,
                db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return booking_service.list_user_bookings(
        db, actor, status=booking_status.value if booking_status else None, limit=limit, offset=offset,
    )


@router.get("/bookings/admin/all", response_model=list[BookingOut], summary="All bookings (staff/admin)")
def all_bookings(booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
                 space_id: Optional[str] = None, user_id: Optional[str] = None,
                 limit: int = settings.ADMIN_PAGE_SIZE, offset: int = 0,
                 db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return booking_service.list_all_bookings(
        db, actor, status=booking_status.value if booking_status else None,
        space_id=space_id, user_id=user_id, limit=limit, offset=offset,
    )


@router.post("/bookings/verify-qr", response_model=QrVerifyOut, summary="Verify a booking QR token offline")
def verify_qr(body: QrVerifyRequest):
    claims = verify_qr_token(body.token)
    return {"valid": True, **claims}


@router.post("/bookings", response_model=BookingOut, status_code=status.HTTP_201_CREATED,
             summary="Reserve a space for a time window")
def create_booking(body: BookingCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return booking_service.create_booking(
        db, actor, body.space_id, body.start_time, body.end_time, vehicle_number=body.vehicle_number,
    )


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return booking_service.get_booking(db, actor, booking_id)


@router.get("/bookings/{booking_id}/qr", response_model=QrImageOut, summary="QR code image for a booking")
def booking_qr(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    booking = booking_service.get_booking(db, actor, booking_id)
    return {"booking_id": booking.id, "token": booking.qr_code, "image": render_qr_data_url(booking.qr_code)}


@router.put("/bookings/{booking_id}", response_model=BookingStatusOut,
            summary="Change booking status and/or vehicle number")
def update_booking(booking_id: str, body: BookingUpdate, db: Session = Depends(get_db),
                   actor: Actor = Depends(get_actor)):
    change = booking_service.update_booking(
        db, actor, booking_id,
        status=body.status.value if body.status else None,
        vehicle_number=body.vehicle_number,
    )
    return _status_out(change)


@router.delete("/bookings/{booking_id}", response_model=BookingStatusOut, summary="Cancel a booking")
def cancel_booking(booking_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return _status_out(booking_service.cancel_booking(db, actor, booking_id))
