import abc
from typing import List, Optional

from sqlalchemy import and_, or_

from skillhub.models.meeting import Meeting, CancelMeeting
from skillhub.repositories.base import Repository, SqlRepository, _raw


class MeetingRepository(Repository):

    @abc.abstractmethod
    def list_for_user(self, user_id: int, other_user_id: Optional[int] = None) -> List[Meeting]:
        ...

    @abc.abstractmethod
    def add_cancellation(self, cancellation: CancelMeeting) -> CancelMeeting:
        ...

    @abc.abstractmethod
    def get_cancellation(self, meeting_id: int) -> Optional[CancelMeeting]:
        ...

    @abc.abstractmethod
    def acknowledge_cancellation(self, cancellation_id: int, **changes) -> bool:
        """Conditional write guarded by ``acknowledged`` still being False."""

    @abc.abstractmethod
    def list_unacknowledged_for(self, user_id: int) -> List[CancelMeeting]:
        """Cancellations the user still has to acknowledge."""


class SqlMeetingRepository(SqlRepository, MeetingRepository):
    model = Meeting

    def list_for_user(self, user_id, other_user_id=None):
        if other_user_id is not None:
            query = self.db.query(Meeting).filter(or_(
                and_(Meeting.sender_id == user_id, Meeting.receiver_id == other_user_id),
                and_(Meeting.sender_id == other_user_id, Meeting.receiver_id == user_id),
            ))
        else:
            query = self.db.query(Meeting).filter(
                or_(Meeting.sender_id == user_id, Meeting.receiver_id == user_id)
            )
        return query.order_by(Meeting.meeting_time.desc()).all()

    def add_cancellation(self, cancellation):
        self.db.add(cancellation)
        self.db.flush()
        return cancellation

    def get_cancellation(self, meeting_id):
        return self.db.query(CancelMeeting).filter(
            CancelMeeting.meeting_id == meeting_id
        ).first()

    def acknowledge_cancellation(self, cancellation_id, **changes):
        updated = self.db.query(CancelMeeting).filter(
            CancelMeeting.id == cancellation_id,
            CancelMeeting.acknowledged.is_(False),
        ).update(
            {key: _raw(value) for key, value in changes.items()},
            synchronize_session="fetch",
        )
        return updated == 1

    def list_unacknowledged_for(self, user_id):
        return self.db.query(CancelMeeting).join(
            Meeting, Meeting.id == CancelMeeting.meeting_id
        ).filter(
            CancelMeeting.acknowledged.is_(False),
            CancelMeeting.cancelled_by != user_id,
            or_(Meeting.sender_id == user_id, Meeting.receiver_id == user_id),
        ).order_by(CancelMeeting.id.desc()).all()
