import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, Index, func, text
from skillhub.database import Base


class CompletionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CompletionTarget(str, enum.Enum):
    USER1 = "user1"
    USER2 = "user2"
    BOTH = "both"


class SessionCompletionRequest(Base):
    __tablename__ = "session_completion_requests"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    requested_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    request_for_user = Column(String(10), nullable=False, default=CompletionTarget.BOTH.value)
    status = Column(String(20), nullable=False, default=CompletionStatus.PENDING.value, index=True)

    approved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(TIMESTAMP, nullable=True)
    rejected_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rejected_at = Column(TIMESTAMP, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())

    # One pending request per (session, requester)
    __table_args__ = (
        Index(
            "uq_completion_pending_per_user",
            "session_id",
            "requested_by",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )
