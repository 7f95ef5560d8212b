# app/models/payment.py
"""
Payments table — one row per charge attempt against a booking.
A completed payment is what flips the booking to paid; refunds are recorded here too.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey
from app.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String(20), nullable=False)                 # card | paypal | wallet | cash
    status = Column(String(20), nullable=False, default="pending", index=True)
    transaction_id = Column(String(64))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    refunded_at = Column(DateTime)

    def __repr__(self):
        return f"<Payment {self.id} booking={self.booking_id} status={self.status}>"
