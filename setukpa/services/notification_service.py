# setukpa/services/notification_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from setukpa.core.config import settings
from setukpa.core.exceptions import NotFoundError
from setukpa.models.enums import NotificationType
from setukpa.models.notification import Notification
from setukpa.models.user import User
from setukpa.workers.queue import enqueue_notification_task

logger = logging.getLogger(__name__)


def notify(
    user_id: Optional[int],
    type: NotificationType,
    title: str,
    message: str,
    related_id: Optional[int] = None,
) -> Optional[str]:
    """
    Fire-and-forget: hand the event to the notification queue.
    Called after the request's commit; a failing queue is logged and the
    caller's change stays committed.
    """
    if user_id is None or not settings.NOTIFICATIONS_ENABLED:
        return None

    payload = {
        "user_id": user_id,
        "type": type.value,
        "title": title,
        "message": message,
        "related_id": related_id,
    }
    try:
        return enqueue_notification_task(payload)
    except Exception as e:
        logger.warning(f"Could not enqueue {type.value} notification for user {user_id}: {e}")
        return None


def create_notification(
    db: Session,
    *,
    user_id: int,
    type: str,
    title: str,
    message: str,
    related_id: Optional[int] = None,
) -> Notification:
    if db.query(User).get(user_id) is None:
        raise NotFoundError("User", user_id)

    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        related_id=related_id,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification


def list_notifications_for_user(
    db: Session,
    *,
    user: User,
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user.id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def mark_read(db: Session, *, user: User, notification_id: int) -> Notification:
    notification = db.query(Notification).get(notification_id)
    if notification is None or notification.user_id != user.id:
        raise NotFoundError("Notification", notification_id)
    notification.is_read = True
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return notification
