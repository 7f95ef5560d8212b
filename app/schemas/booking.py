# app/schemas/booking.py
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.enums import BookingStatus


class BookingCreate(BaseModel):
    space_id: str
    start_time: datetime
    end_time: datetime
    vehicle_number: Optional[str] = Field(default=None, max_length=32)


class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    vehicle_number: Optional[str] = Field(default=None, max_length=32)

    @model_validator(mode="after")
    def _something_to_change(self):
        if self.status is None and self.vehicle_number is None:
            raise ValueError("Provide status and/or vehicle_number")
        return self


class BookingOut(BaseModel):
    id: str
    user_id: str
    space_id: str
    start_time: datetime
    end_time: datetime
    total_amount: Decimal
    status: str
    payment_status: str
    vehicle_number: Optional[str]
    qr_code: Optional[str]
    created_at: Optional[datetime]
    cancelled_at: Optional[datetime]

    class Config:
        from_attributes = True


class BookingStatusOut(BaseModel):
    booking: BookingOut
    space_status: str
    maintenance_hold: bool = False
    warnings: list[str] = []


class QrVerifyRequest(BaseModel):
    token: str


class QrVerifyOut(BaseModel):
    valid: bool
    booking_id: str
    space_id: str
    start_time: datetime
    end_time: datetime


class QrImageOut(BaseModel):
    booking_id: str
    token: str
    image: str   # data:image/png;base64,...
