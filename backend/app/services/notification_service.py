"""
Notification Service — Inserts notification rows on state transitions.
Rows are added to the caller's session so they commit (or roll back)
together with the change they describe. Delivery is polling-based.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.notification import Notification

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("enrollment", "webinar", "course", "payment", "other")


class NotificationService:

    @staticmethod
    def emit(
        db: Session,
        user_id: Optional[str],
        title: str,
        message: str,
        type: str,
        related_id: Optional[str] = None,
        on_model: Optional[str] = None,
    ) -> Notification:
        """Stage a notification in the current transaction.

        Args:
            db: Database session; the caller owns the commit.
            user_id: The user whose action triggered the notification.
            title: Short headline shown in the admin list.
            message: Human readable body.
            type: One of NOTIFICATION_TYPES.
            related_id: Id of the record the notification is about.
            on_model: Model name of the related record.

        Returns:
            The pending Notification row.
        """
        if type not in NOTIFICATION_TYPES:
            type = "other"

        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            related_id=related_id,
            on_model=on_model,
        )
        db.add(notification)
        logger.info("notification staged: %s (%s -> %s)", title, on_model, related_id)
        return notification
