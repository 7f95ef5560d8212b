# app/schemas/notification.py
from pydantic import BaseModel
from datetime import datetime


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True
