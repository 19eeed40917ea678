import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, func
from skillhub.database import Base


class MeetingState(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="SET NULL"), nullable=True, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    meeting_time = Column(TIMESTAMP, nullable=False)
    meeting_link = Column(String(255), nullable=True)
    accept_status = Column(Boolean, default=False, nullable=False)
    state = Column(String(20), nullable=False, default=MeetingState.PENDING.value, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    def has_party(self, user_id: int) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def counterparty_of(self, user_id: int) -> int:
        return self.receiver_id if user_id == self.sender_id else self.sender_id


class CancelMeeting(Base):
    __tablename__ = "meeting_cancellations"

    id = Column(Integer, primary_key=True, index=True)
    meeting_id = Column(Integer, ForeignKey("meetings.id", ondelete="CASCADE"), unique=True, nullable=False)
    cancelled_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(Text, nullable=False)
    acknowledged = Column(Boolean, default=False, nullable=False)
    acknowledged_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    acknowledged_at = Column(TIMESTAMP, nullable=True)
    cancelled_at = Column(TIMESTAMP, server_default=func.now())
