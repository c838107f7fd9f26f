"""
Notification Tasks for Worker
These tasks are executed by RQ workers to deliver notifications asynchronously
"""

import logging
from setukpa.core.exceptions import SetukpaError
from setukpa.db.session import SessionLocal
from setukpa.services.notification_service import create_notification

logger = logging.getLogger(__name__)


def notification_task(payload: dict) -> dict:
    """
    Worker task persisting one Notification row.

    Args:
        payload: dict with user_id, type, title, message and optional related_id,
            as built by notification_service.notify()

    Returns:
        Dictionary with the delivery result
    """
    db = SessionLocal()
    try:
        notification = create_notification(db, **payload)
        logger.info(
            f"Delivered {notification.type} notification {notification.id} "
            f"to user {notification.user_id}"
        )
        return {
            "status": "success",
            "notification_id": notification.id,
            "user_id": notification.user_id,
        }

    except SetukpaError as e:
        logger.error(f"Notification for user {payload.get('user_id')} rejected: {e}")
        return {
            "status": "error",
            "user_id": payload.get("user_id"),
            "error": e.message,
        }

    except Exception as e:
        db.rollback()
        logger.error(
            f"Unexpected error delivering notification to user {payload.get('user_id')}: {e}",
            exc_info=True,
        )
        # let RQ retry it
        raise

    finally:
        db.close()
