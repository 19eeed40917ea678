import abc
from typing import List

from skillhub.models.counter_offer import SessionCounterOffer
from skillhub.repositories.base import Repository, SqlRepository


class CounterOfferRepository(Repository):

    @abc.abstractmethod
    def list_for_session(self, session_id: int) -> List[SessionCounterOffer]:
        """Newest first."""


class SqlCounterOfferRepository(SqlRepository, CounterOfferRepository):
    model = SessionCounterOffer

    def list_for_session(self, session_id):
        return self.db.query(SessionCounterOffer).filter(
            SessionCounterOffer.session_id == session_id
        ).order_by(SessionCounterOffer.id.desc()).all()
