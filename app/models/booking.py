# app/models/booking.py
"""
Bookings table — one reservation of one space for a half-open time window [start, end).
Live bookings (pending | confirmed | active) on the same space never overlap.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Numeric, Text, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.database import Base


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    space_id = Column(String(36), ForeignKey("parking_spaces.id", ondelete="CASCADE"),
                      nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)               # naive UTC
    end_time = Column(DateTime, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default="pending")
    vehicle_number = Column(String(32))
    qr_code = Column(Text)                                      # signed token, see app.utils.qr_token
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    cancelled_at = Column(DateTime)

    space = relationship("ParkingSpace")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_booking_window"),
        CheckConstraint("total_amount > 0", name="check_booking_amount_positive"),
        Index("ix_bookings_space_window", "space_id", "start_time", "end_time"),
    )

    def window(self) -> dict:
        return {"booking_id": self.id, "start_time": self.start_time,
                "end_time": self.end_time, "status": self.status}

    def __repr__(self):
        return f"<Booking {self.id} space={self.space_id} status={self.status}/{self.payment_status}>"
