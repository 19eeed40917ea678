import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, JSON, func
from skillhub.database import Base


class CancelResponseStatus(str, enum.Enum):
    PENDING = "pending"
    AGREED = "agreed"
    DISPUTED = "disputed"


class CancelResolution(str, enum.Enum):
    PENDING = "pending"
    CANCELED = "canceled"
    PARTIAL_COMPLETION = "partial_completion"
    CONTINUED = "continued"


class SessionCancelRequest(Base):
    __tablename__ = "session_cancel_requests"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    initiator_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    evidence_files = Column(JSON, default=list)

    # Counterparty response
    response_status = Column(String(20), nullable=False, default=CancelResponseStatus.PENDING.value)
    responder_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    response_description = Column(Text, nullable=True)
    response_evidence_files = Column(JSON, default=list)
    work_completion_percentage = Column(Integer, nullable=True)
    responded_at = Column(TIMESTAMP, nullable=True)

    # Terminal once not pending
    resolution = Column(String(20), nullable=False, default=CancelResolution.PENDING.value, index=True)
    resolved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolution_note = Column(Text, nullable=True)
    resolved_at = Column(TIMESTAMP, nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())
