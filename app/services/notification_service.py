import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import NotificationType
from app.models.notification import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    @staticmethod
    def notify(
        db: Session,
        user_id: int,
        type: NotificationType,
        title: str,
        body: str,
        related_id: Optional[int] = None,
    ) -> Optional[Notification]:
        """Insert a notification row for ``user_id``.

        Failures are logged and swallowed: a notification that cannot be
        written must never undo the state transition that triggered it.
        Returns the stored row, or ``None`` when the insert failed.
        """
        try:
            notification = Notification(
                user_id=user_id,
                type=NotificationType(type).value,
                title=title,
                body=body,
                related_id=related_id,
                is_read=False,
            )
            db.add(notification)
            db.commit()
            db.refresh(notification)
            return notification
        except (SQLAlchemyError, ValueError) as e:
            db.rollback()
            logger.error(f"Failed to create {type} notification for user {user_id}: {e}")
            return None

    @staticmethod
    def list_for_user(db: Session, user_id: int, skip: int = 0, limit: int = 50) -> tuple[list[Notification], int]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        total = query.count()
        items = (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def unread_count(db: Session, user_id: int) -> int:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .count()
        )

    @staticmethod
    def mark_read(db: Session, user_id: int, notification_id: int) -> Optional[Notification]:
        notification = (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )
        if not notification:
            return None
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.now(timezone.utc).replace(tzinfo=None)
            db.commit()
            db.refresh(notification)
        return notification

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        count = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .update({"is_read": True, "read_at": now}, synchronize_session=False)
        )
        db.commit()
        return count
