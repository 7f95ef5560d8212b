# app/schemas/parking_space.py
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.enums import SpaceStatus, SpaceType


class Position(BaseModel):
    x: float
    y: float


class SpaceCreate(BaseModel):
    number: str = Field(min_length=1)
    floor: int = Field(ge=1)
    section: str = Field(min_length=1)
    type: SpaceType
    hourly_rate: Decimal = Field(gt=0, decimal_places=2)
    position: Position


class SpaceUpdate(BaseModel):
    number: Optional[str] = None
    floor: Optional[int] = Field(default=None, ge=1)
    section: Optional[str] = None
    type: Optional[SpaceType] = None
    status: Optional[SpaceStatus] = None
    hourly_rate: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    position: Optional[Position] = None


class SpaceOut(BaseModel):
    id: str
    number: str
    floor: int
    section: str
    type: str
    status: str
    hourly_rate: Decimal
    position: dict
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class BookingWindowOut(BaseModel):
    booking_id: str
    start_time: datetime
    end_time: datetime
    status: str


class SpaceAvailabilityOut(BaseModel):
    space_id: str
    bookings: list[BookingWindowOut]


class AvailabilityCheckOut(BaseModel):
    space_id: str
    start_time: datetime
    end_time: datetime
    available: bool
    conflict: Optional[BookingWindowOut] = None
