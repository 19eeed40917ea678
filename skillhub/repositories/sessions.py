import abc
from typing import List, Optional

from sqlalchemy import or_

from skillhub.models.session import Session, SessionStatus
from skillhub.repositories.base import Repository, SqlRepository, _raw


class SessionRepository(Repository):

    @abc.abstractmethod
    def list_for_user(self, user_id: int, status: Optional[str] = None) -> List[Session]:
        ...

    @abc.abstractmethod
    def list_all(self) -> List[Session]:
        ...

    @abc.abstractmethod
    def count_pending_between(self, user1_id: int, user2_id: int) -> int:
        """Pending proposals from ``user1_id`` to ``user2_id``."""

    @abc.abstractmethod
    def lock(self, session_id: int) -> Optional[Session]:
        """Row-lock the session until the surrounding transaction ends."""


class SqlSessionRepository(SqlRepository, SessionRepository):
    model = Session

    def list_for_user(self, user_id, status=None):
        query = self.db.query(Session).filter(
            or_(Session.user1_id == user_id, Session.user2_id == user_id)
        )
        if status:
            query = query.filter(Session.status == _raw(status))
        return query.order_by(Session.id.desc()).all()

    def list_all(self):
        return self.db.query(Session).order_by(Session.id).all()

    def count_pending_between(self, user1_id, user2_id):
        return self.db.query(Session).filter(
            Session.user1_id == user1_id,
            Session.user2_id == user2_id,
            Session.status == SessionStatus.PENDING.value,
        ).count()

    def lock(self, session_id):
        return self.db.query(Session).filter(
            Session.id == session_id
        ).with_for_update().populate_existing().first()
