from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from skillhub.database import Base
from skillhub.models.user import User
from skillhub.services import notification_service


def _build_db():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal()


def _create_user(db, email: str = "notify@test.edu") -> User:
    user = User(
        first_name="Notify",
        last_name="User",
        email=email,
        password_hash="hash",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def test_notification_service_crud_flow():
    db = _build_db()
    try:
        user = _create_user(db)
        notification_service.create_notification(
            db,
            recipient_id=user.id,
            actor_id=None,
            session_id=None,
            event_type="session_proposed",
            message="Proposed",
        )
        notification_service.create_notification(
            db,
            recipient_id=user.id,
            actor_id=None,
            session_id=None,
            event_type="session_accepted",
            message="Accepted",
        )
        db.commit()

        unread = notification_service.list_user_notifications(
            db,
            user_id=user.id,
            unread_only=True,
            limit=50,
        )
        assert len(unread) == 2
        assert notification_service.get_unread_count(db, user_id=user.id) == 2

        one = notification_service.mark_notification_read(
            db,
            user_id=user.id,
            notification_id=unread[0].id,
        )
        assert one is not None
        assert one.is_read is True
        assert notification_service.get_unread_count(db, user_id=user.id) == 1

        updated = notification_service.mark_all_notifications_read(db, user_id=user.id)
        assert updated == 1
        assert notification_service.get_unread_count(db, user_id=user.id) == 0
    finally:
        db.close()


def test_mark_read_ignores_other_users_notifications():
    db = _build_db()
    try:
        owner = _create_user(db)
        other = _create_user(db, email="other@test.edu")
        notification = notification_service.create_notification(
            db,
            recipient_id=owner.id,
            actor_id=other.id,
            session_id=None,
            event_type="meeting_proposed",
            message="Meet?",
        )
        db.commit()

        assert notification_service.mark_notification_read(
            db, user_id=other.id, notification_id=notification.id
        ) is None
        assert notification_service.get_unread_count(db, user_id=owner.id) == 1
    finally:
        db.close()


def test_sql_sink_truncates_long_messages():
    db = _build_db()
    try:
        user = _create_user(db)
        sink = notification_service.SqlNotificationSink(db)
        sink.emit(
            "report_resolved",
            recipient_id=user.id,
            actor_id=None,
            session_id=None,
            message="x" * 800,
        )
        db.commit()

        stored = notification_service.list_user_notifications(db, user_id=user.id)
        assert len(stored) == 1
        assert len(stored[0].message) == 500
        assert stored[0].event_type == "report_resolved"
    finally:
        db.close()
