# app/services/payment_service.py
"""
Payments against bookings.

record_payment charges through the payment processor and writes the payment row
and the booking's payment/booking status together. Space status is never touched
here: a failed payment keeps the space reserved until the booking is cancelled.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.database import store_call, unit_of_work
from app.errors import AlreadyPaid, AmountMismatch, BookingNotFound, IllegalTransition, NotRefundable, PaymentNotFound
from app.models.booking import Booking
from app.models.enums import BookingStatus, NotificationType, PaymentRecordStatus, PaymentStatus
from app.models.payment import Payment
from app.services.actor import Actor
from app.services.booking_rules import to_money
from app.services.notification_service import create_notification
from app.utils.logger import get_logger

logger = get_logger(__name__)

PAYABLE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value, BookingStatus.ACTIVE.value)


@dataclass
class PaymentOutcome:
    payment: Payment
    booking: Booking
    success: bool
    message: str


def record_payment(db: Session, actor: Actor, booking_id: str, amount, method: str,
                   processor) -> PaymentOutcome:
    with unit_of_work(db):
        booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().first()
        if not booking:
            raise BookingNotFound(f"Booking '{booking_id}' not found")
        actor.require_owner_or_staff(booking.user_id)

        expected = to_money(booking.total_amount)
        if to_money(amount) != expected:
            raise AmountMismatch(f"Payment amount {to_money(amount)} does not match booking amount {expected}",
                                 expected=str(expected))
        if booking.payment_status == PaymentStatus.PAID.value:
            raise AlreadyPaid("Booking is already paid")
        if booking.status not in PAYABLE_STATUSES:
            raise IllegalTransition(current=booking.status, target=PaymentStatus.PAID.value)

        result = processor.charge(booking.id, expected, method)
        payment = Payment(
            user_id=booking.user_id,
            booking_id=booking.id,
            amount=expected,
            method=method,
            status=(PaymentRecordStatus.COMPLETED.value if result.success
                    else PaymentRecordStatus.FAILED.value),
            transaction_id=result.transaction_id,
            created_at=datetime.utcnow(),
        )
        db.add(payment)

        if result.success:
            booking.payment_status = PaymentStatus.PAID.value
            if booking.status == BookingStatus.PENDING.value:
                booking.status = BookingStatus.CONFIRMED.value
        else:
            booking.payment_status = PaymentStatus.FAILED.value

    db.refresh(payment)
    db.refresh(booking)
    logger.info(f"[PAYMENT] Booking={booking.id} | {method} {expected} | "
                f"{payment.status} | txn={payment.transaction_id}")
    create_notification(
        db, booking.user_id, NotificationType.PAYMENT.value,
        "Payment received" if result.success else "Payment failed",
        (f"Payment of {expected} for booking {booking.id} succeeded." if result.success
         else f"Payment of {expected} for booking {booking.id} failed. Your space stays reserved; please retry."),
    )
    return PaymentOutcome(payment=payment, booking=booking, success=result.success, message=result.message)


def refund_payment(db: Session, actor: Actor, payment_id: str) -> Payment:
    actor.require_admin()
    with unit_of_work(db):
        payment = db.query(Payment).filter(Payment.id == payment_id).with_for_update().first()
        if not payment:
            raise PaymentNotFound(f"Payment '{payment_id}' not found")
        if payment.status != PaymentRecordStatus.COMPLETED.value:
            raise NotRefundable("Only completed payments can be refunded")

        payment.status = PaymentRecordStatus.REFUNDED.value
        payment.refunded_at = datetime.utcnow()
        booking = db.query(Booking).filter(Booking.id == payment.booking_id).first()
        if booking:
            booking.payment_status = PaymentStatus.REFUNDED.value

    db.refresh(payment)
    logger.info(f"[PAYMENT] Refunded {payment.id} ({payment.amount}) for booking {payment.booking_id}")
    create_notification(db, payment.user_id, NotificationType.PAYMENT.value, "Payment refunded",
                        f"Your payment of {payment.amount} has been refunded.")
    return payment


def get_payment(db: Session, actor: Actor, payment_id: str) -> Payment:
    with store_call(db):
        payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise PaymentNotFound(f"Payment '{payment_id}' not found")
    actor.require_owner_or_staff(payment.user_id)
    return payment


def list_user_payments(db: Session, actor: Actor, limit: int = 50, offset: int = 0):
    with store_call(db):
        return (
            db.query(Payment)
            .filter(Payment.user_id == actor.user_id)
            .order_by(Payment.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
