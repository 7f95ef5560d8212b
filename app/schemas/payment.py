# app/schemas/payment.py
from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.enums import PaymentMethod


class PaymentCreate(BaseModel):
    booking_id: str
    method: PaymentMethod
    amount: Decimal = Field(gt=0)


class PaymentOut(BaseModel):
    id: str
    booking_id: str
    amount: Decimal
    method: str
    status: str
    transaction_id: Optional[str]
    created_at: Optional[datetime]
    refunded_at: Optional[datetime]

    class Config:
        from_attributes = True


class PaymentResultOut(BaseModel):
    message: str
    success: bool
    payment: PaymentOut
    booking_status: str
    payment_status: str
