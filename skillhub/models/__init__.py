# skillhub/models/__init__.py
# Import models in dependency order
from .user import User, UserRole
from .skill import Skill
from .session import Session, SessionStatus
from .counter_offer import SessionCounterOffer, CounterOfferStatus
from .progress import SessionProgress, ProgressStatus
from .completion import SessionCompletionRequest, CompletionStatus, CompletionTarget
from .cancellation import SessionCancelRequest, CancelResponseStatus, CancelResolution
from .meeting import Meeting, MeetingState, CancelMeeting
from .report import ReportInSession, ReportStatus, ReportReason, ReportResolution
from .notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Skill",
    "Session",
    "SessionStatus",
    "SessionCounterOffer",
    "CounterOfferStatus",
    "SessionProgress",
    "ProgressStatus",
    "SessionCompletionRequest",
    "CompletionStatus",
    "CompletionTarget",
    "SessionCancelRequest",
    "CancelResponseStatus",
    "CancelResolution",
    "Meeting",
    "MeetingState",
    "CancelMeeting",
    "ReportInSession",
    "ReportStatus",
    "ReportReason",
    "ReportResolution",
    "Notification",
]
