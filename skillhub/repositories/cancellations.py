import abc
from typing import List, Optional

from skillhub.models.cancellation import (
    SessionCancelRequest,
    CancelResolution,
    CancelResponseStatus,
)
from skillhub.repositories.base import Repository, SqlRepository


class CancelRequestRepository(Repository):

    @abc.abstractmethod
    def find_open(self, session_id: int) -> Optional[SessionCancelRequest]:
        """The request for the session whose resolution is still pending."""

    @abc.abstractmethod
    def latest_for_session(self, session_id: int) -> Optional[SessionCancelRequest]:
        ...

    @abc.abstractmethod
    def list_disputed(self) -> List[SessionCancelRequest]:
        ...


class SqlCancelRequestRepository(SqlRepository, CancelRequestRepository):
    model = SessionCancelRequest

    def find_open(self, session_id):
        return self.db.query(SessionCancelRequest).filter(
            SessionCancelRequest.session_id == session_id,
            SessionCancelRequest.resolution == CancelResolution.PENDING.value,
        ).first()

    def latest_for_session(self, session_id):
        return self.db.query(SessionCancelRequest).filter(
            SessionCancelRequest.session_id == session_id
        ).order_by(SessionCancelRequest.id.desc()).first()

    def list_disputed(self):
        return self.db.query(SessionCancelRequest).filter(
            SessionCancelRequest.response_status == CancelResponseStatus.DISPUTED.value,
            SessionCancelRequest.resolution == CancelResolution.PENDING.value,
        ).order_by(SessionCancelRequest.id).all()
