import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, JSON, func

from skillhub.database import Base


class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"


ACTIVE_REPORT_STATUSES = (ReportStatus.PENDING, ReportStatus.UNDER_REVIEW)


class ReportReason(str, enum.Enum):
    NOT_SUBMITTING_WORK = "not_submitting_work"
    NOT_RESPONSIVE = "not_responsive"
    POOR_QUALITY_WORK = "poor_quality_work"
    INAPPROPRIATE_BEHAVIOR = "inappropriate_behavior"
    NOT_FOLLOWING_SESSION_TERMS = "not_following_session_terms"
    OTHER = "other"


class ReportResolution(str, enum.Enum):
    MARK_RESOLVED = "mark_resolved"
    WARN_REPORTED = "warn_reported"
    WARN_REPORTER = "warn_reporter"
    DISMISS = "dismiss"


class ReportInSession(Base):
    __tablename__ = "session_reports"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reported_user = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    evidence_files = Column(JSON, default=list)

    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)
    resolution = Column(String(30), nullable=True)
    admin_response = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    admin_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(TIMESTAMP, nullable=True)
    resolved_at = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
