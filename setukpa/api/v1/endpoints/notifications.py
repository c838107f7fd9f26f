# setukpa/api/v1/endpoints/notifications.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from setukpa.core.security import get_current_user
from setukpa.db.session import get_db
from setukpa.models.user import User
from setukpa.schemas.notification import NotificationPublic
from setukpa.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationPublic])
def list_my_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 100,
):
    return notification_service.list_notifications_for_user(
        db, user=current_user, unread_only=unread_only, skip=skip, limit=limit
    )


@router.post("/{notification_id}/read", response_model=NotificationPublic)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notification_service.mark_read(
        db, user=current_user, notification_id=notification_id
    )
