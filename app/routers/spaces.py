# app/routers/spaces.py
"""Space directory — public browsing, availability, and staff/admin management."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Optional
from app.database import get_db
from app.dependencies import get_actor
from app.models.enums import SpaceStatus, SpaceType
from app.schemas.parking_space import (
    AvailabilityCheckOut, SpaceAvailabilityOut, SpaceCreate, SpaceOut, SpaceUpdate,
)
from app.services import booking_service, space_service
from app.services.actor import Actor

router = APIRouter()


@router.get("/spaces", response_model=list[SpaceOut], summary="List parking spaces")
def list_spaces(
    floor: Optional[int] = None,
    section: Optional[str] = None,
    type: Optional[SpaceType] = None,
    status: Optional[SpaceStatus] = None,
    available: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    """All spaces ordered by floor, section and number. `available=true` keeps free spaces only."""
    return space_service.list_spaces(
        db, floor=floor, section=section,
        type=type.value if type else None,
        status=status.value if status else None,
        available=available,
    )


@router.get("/spaces/{space_id}", response_model=SpaceOut)
def get_space(space_id: str, db: Session = Depends(get_db)):
    return space_service.get_space(db, space_id)


@router.get("/spaces/{space_id}/availability", response_model=SpaceAvailabilityOut,
            summary="Booked windows on a space within a date range")
def get_space_availability(
    space_id: str,
    start_date: datetime = Query(alias="startDate"),
    end_date: datetime = Query(alias="endDate"),
    db: Session = Depends(get_db),
):
    windows = space_service.space_bookings_in_range(db, space_id, start_date, end_date)
    return {"space_id": space_id, "bookings": windows}


@router.get("/spaces/{space_id}/check", response_model=AvailabilityCheckOut,
            summary="Can this window be booked?")
def check_space_window(space_id: str, start: datetime, end: datetime, db: Session = Depends(get_db)):
    return booking_service.check_availability(db, space_id, start, end)


@router.post("/spaces", response_model=SpaceOut, status_code=status.HTTP_201_CREATED,
             summary="Create a parking space (admin)")
def create_space(body: SpaceCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return space_service.create_space(
        db, actor, number=body.number, floor=body.floor, section=body.section,
        type=body.type.value, hourly_rate=body.hourly_rate, position=body.position.model_dump(),
    )


@router.put("/spaces/{space_id}", response_model=SpaceOut,
            summary="Update a parking space (admin; staff may change status)")
def update_space(space_id: str, body: SpaceUpdate, db: Session = Depends(get_db),
                 actor: Actor = Depends(get_actor)):
    changes = body.model_dump(exclude_none=True, mode="json")
    if body.hourly_rate is not None:
        changes["hourly_rate"] = body.hourly_rate
    return space_service.update_space(db, actor, space_id, changes)


@router.delete("/spaces/{space_id}", summary="Delete a parking space (admin)")
def delete_space(space_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    space_service.delete_space(db, actor, space_id)
    return {"space_id": space_id, "status": "deleted"}
