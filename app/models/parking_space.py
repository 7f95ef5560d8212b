# app/models/parking_space.py
"""
Parking spaces table — the space directory.
`status` is driven by the booking lifecycle except for `maintenance`,
which only staff set and clear.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON, CheckConstraint
from app.database import Base


class ParkingSpace(Base):
    __tablename__ = "parking_spaces"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    number = Column(String(20), unique=True, nullable=False, index=True)
    floor = Column(Integer, nullable=False)
    section = Column(String(20), nullable=False)
    type = Column(String(20), nullable=False, index=True)       # regular | compact | disabled | electric
    status = Column(String(20), nullable=False, default="available", index=True)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    position = Column(JSON, nullable=False)                     # {"x": .., "y": ..}, display only
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("floor > 0", name="check_space_floor_positive"),
        CheckConstraint("hourly_rate > 0", name="check_space_rate_positive"),
    )

    def __repr__(self):
        return f"<ParkingSpace {self.number} floor={self.floor} status={self.status}>"
