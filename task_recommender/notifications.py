# notifications.py
import logging
from typing import Dict, List, Optional

from .access import require_role
from .db import MongoDBManager
from .models import UserRole

logger = logging.getLogger(__name__)

ALL_ROLES = (UserRole.EXECUTIVE, UserRole.MANAGER, UserRole.EMPLOYEE)
NOTIFICATION_PAGE_SIZE = 50


def list_notifications(
    actor: Dict,
    db: Optional[MongoDBManager] = None,
    unread_only: bool = False,
) -> List[Dict]:
    require_role(actor, ALL_ROLES)
    db = db or MongoDBManager()
    return db.get_notifications(
        actor["user_id"], unread_only=unread_only, limit=NOTIFICATION_PAGE_SIZE
    )


def mark_read(
    notification_id: str,
    actor: Dict,
    db: Optional[MongoDBManager] = None,
) -> Dict:
    """Mark one of the actor's own notifications as read."""
    require_role(actor, ALL_ROLES)
    db = db or MongoDBManager()

    notification = db.get_notification(notification_id)
    # someone else's notification is reported the same as a missing one
    if not notification or notification.get("user_id") != actor["user_id"]:
        raise ValueError(f"Notification not found: {notification_id}")

    updated = db.mark_notification_read(notification_id)
    logger.info("Notification %s marked read", notification_id)
    return updated
