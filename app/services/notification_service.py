# app/services/notification_service.py
"""
Notification sink.
Writes user-facing messages on booking/payment status changes. Fire-and-forget:
a failure here is logged and rolled back, it never undoes the change that caused it.
"""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import store_call
from app.errors import NotificationNotFound
from app.models.notification import Notification
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_notification(db: Session, user_id: str, type: str, title: str, message: str) -> Optional[str]:
    """Persist a notification. Returns its id, or None if it could not be stored."""
    notification = Notification(user_id=user_id, type=type, title=title, message=message, read=False)
    try:
        db.add(notification)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"[NOTIFY] Could not store notification for {user_id}: {exc}")
        return None
    logger.info(f"[NOTIFY][{type.upper()}] {user_id}: {title}")
    return notification.id


def list_notifications(db: Session, user_id: str, read: Optional[bool] = None,
                       type: Optional[str] = None, limit: int = 50, offset: int = 0):
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if read is not None:
        q = q.filter(Notification.read == read)
    if type:
        q = q.filter(Notification.type == type)
    with store_call(db):
        return q.order_by(Notification.created_at.desc()).offset(offset).limit(limit).all()


def mark_read(db: Session, user_id: str, notification_id: str) -> Notification:
    with store_call(db):
        notification = db.query(Notification).filter(
            Notification.id == notification_id, Notification.user_id == user_id
        ).first()
        if not notification:
            raise NotificationNotFound(f"Notification '{notification_id}' not found")
        notification.read = True
        db.commit()
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    with store_call(db):
        count = db.query(Notification).filter(
            Notification.user_id == user_id, Notification.read == False  # noqa: E712
        ).update({Notification.read: True}, synchronize_session=False)
        db.commit()
    return count


def delete_notification(db: Session, user_id: str, notification_id: str) -> None:
    with store_call(db):
        notification = db.query(Notification).filter(
            Notification.id == notification_id, Notification.user_id == user_id
        ).first()
        if not notification:
            raise NotificationNotFound(f"Notification '{notification_id}' not found")
        db.delete(notification)
        db.commit()
