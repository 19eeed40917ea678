import abc
from typing import List, Optional, Set

from skillhub.models.completion import SessionCompletionRequest, CompletionStatus
from skillhub.repositories.base import Repository, SqlRepository


class CompletionRepository(Repository):

    @abc.abstractmethod
    def find_pending(self, session_id: int, requested_by: int) -> Optional[SessionCompletionRequest]:
        ...

    @abc.abstractmethod
    def list_for_session(self, session_id: int) -> List[SessionCompletionRequest]:
        ...

    @abc.abstractmethod
    def approved_requesters(self, session_id: int) -> Set[int]:
        """User ids holding an approved completion request for the session."""


class SqlCompletionRepository(SqlRepository, CompletionRepository):
    model = SessionCompletionRequest

    def find_pending(self, session_id, requested_by):
        return self.db.query(SessionCompletionRequest).filter(
            SessionCompletionRequest.session_id == session_id,
            SessionCompletionRequest.requested_by == requested_by,
            SessionCompletionRequest.status == CompletionStatus.PENDING.value,
        ).first()

    def list_for_session(self, session_id):
        return self.db.query(SessionCompletionRequest).filter(
            SessionCompletionRequest.session_id == session_id
        ).order_by(SessionCompletionRequest.id).all()

    def approved_requesters(self, session_id):
        rows = self.db.query(SessionCompletionRequest.requested_by).filter(
            SessionCompletionRequest.session_id == session_id,
            SessionCompletionRequest.status == CompletionStatus.APPROVED.value,
        ).distinct().all()
        return {row[0] for row in rows}
