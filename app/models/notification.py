# app/models/notification.py
"""
Notifications table — user-facing messages written on booking and payment status changes.
Delivery to devices is out of scope; clients poll /notifications.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Boolean
from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(20), nullable=False)                   # booking | payment | reminder | system
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Notification {self.id} user={self.user_id} read={self.read}>"
