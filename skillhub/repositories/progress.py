import abc
from typing import List, Optional

from skillhub.models.progress import SessionProgress
from skillhub.repositories.base import Repository, SqlRepository


class ProgressRepository(Repository):

    @abc.abstractmethod
    def find(self, session_id: int, user_id: int) -> Optional[SessionProgress]:
        ...

    @abc.abstractmethod
    def list_for_session(self, session_id: int) -> List[SessionProgress]:
        ...


class SqlProgressRepository(SqlRepository, ProgressRepository):
    model = SessionProgress

    def find(self, session_id, user_id):
        return self.db.query(SessionProgress).filter(
            SessionProgress.session_id == session_id,
            SessionProgress.user_id == user_id,
        ).first()

    def list_for_session(self, session_id):
        return self.db.query(SessionProgress).filter(
            SessionProgress.session_id == session_id
        ).order_by(SessionProgress.id).all()
