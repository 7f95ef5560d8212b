# app/routers/notifications.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
from app.config import settings
from app.database import get_db
from app.dependencies import get_actor
from app.models.enums import NotificationType
from app.schemas.notification import NotificationOut
from app.services import notification_service
from app.services.actor import Actor

router = APIRouter()


@router.get("/notifications", response_model=list[NotificationOut], summary="Caller's notifications")
def list_notifications(
    read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    limit: int = settings.DEFAULT_PAGE_SIZE,
    offset: int = 0,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return notification_service.list_notifications(
        db, actor.user_id, read=read, type=type.value if type else None, limit=limit, offset=offset,
    )


@router.put("/notifications/read-all", summary="Mark all notifications as read")
def mark_all_read(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    count = notification_service.mark_all_read(db, actor.user_id)
    return {"status": "ok", "updated": count}


@router.put("/notifications/{notification_id}/read", response_model=NotificationOut)
def mark_read(notification_id: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return notification_service.mark_read(db, actor.user_id, notification_id)


@router.delete("/notifications/{notification_id}")
def delete_notification(notification_id: str, db: Session = Depends(get_db),
                        actor: Actor = Depends(get_actor)):
    notification_service.delete_notification(db, actor.user_id, notification_id)
    return {"status": "deleted", "notification_id": notification_id}
