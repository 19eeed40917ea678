from __future__ import annotations

import abc
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from skillhub.models.notification import Notification

logger = logging.getLogger(__name__)


EVENT_TYPES = (
    "session_proposed",
    "session_accepted",
    "session_rejected",
    "counter_offer_proposed",
    "counter_offer_accepted",
    "counter_offer_rejected",
    "session_completed",
    "completion_requested",
    "completion_approved",
    "completion_rejected",
    "cancel_requested",
    "cancel_agreed",
    "cancel_disputed",
    "dispute_resolved",
    "meeting_proposed",
    "meeting_accepted",
    "meeting_rejected",
    "meeting_cancelled",
    "meeting_completed",
    "report_resolved",
)


class NotificationSink(abc.ABC):
    """Receives one event per state transition."""

    @abc.abstractmethod
    def emit(
        self,
        event_type: str,
        *,
        recipient_id: int,
        actor_id: Optional[int],
        session_id: Optional[int],
        message: str,
    ) -> None:
        ...


class SqlNotificationSink(NotificationSink):
    """Stores events as in-app notifications in the current unit of work."""

    def __init__(self, db: Session):
        self.db = db

    def emit(self, event_type, *, recipient_id, actor_id, session_id, message):
        create_notification(
            self.db,
            recipient_id=recipient_id,
            actor_id=actor_id,
            session_id=session_id,
            event_type=event_type,
            message=message,
        )


def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_notification_read(
    db: Session,
    *,
    user_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == user_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    actor_id: Optional[int],
    session_id: Optional[int],
    event_type: str,
    message: str,
) -> Notification:
    if event_type not in EVENT_TYPES:
        logger.warning("Unknown notification event type '%s'", event_type)
    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        session_id=session_id,
        event_type=event_type,
        message=message[:500],
    )
    db.add(notification)
    db.flush()
    return notification
