# app/routers/payments.py
"""Payments — charge a booking, list/read payments, admin refunds."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.dependencies import get_actor
from app.schemas.payment import PaymentCreate, PaymentOut, PaymentResultOut
from app.services import payment_service
from app.services.actor import Actor
from app.services.payment_processor import get_payment_processor

router = APIRouter()


@router.post("/payments", response_model=PaymentResultOut, status_code=status.HTTP_201_CREATED,
             summary="Pay for a booking")
def process_payment(body: PaymentCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor),
                    processor=Depends(get_payment_processor)):
    outcome = payment_service.record_payment(
        db, actor, body.booking_id, body.amount, body.method.value, processor,
    )
    return {
        "message": outcome.message,
        "success": outcome.success,
        "payment": outcome.payment,
        "booking_status": outcome.booking.status,
        "payment_status": outcome.booking.payment_status,
    }


@router.get("/payments", response_model=list[PaymentOut], summary="Caller's payments")
def my_payments(limit: int = settings.DEFAULT_PAGE_SIZE, offset: int = 0,
                db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return payment_service.list_user_payments(db, actor, limit=limit, offset=offset)


@router.get("/payments/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return payment_service.get_payment(db, actor, payment_id)


@router.post("/payments/{payment_id}/refund", response_model=PaymentOut, summary="Refund a payment (admin)")
def refund_payment(payment_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return payment_service.refund_payment(db, actor, payment_id)
