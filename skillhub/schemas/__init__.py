# skillhub/schemas/__init__.py

from .auth import Token, TokenData, LoginRequest, RegisterRequest, UserOut
from .session import (
    SessionCreate,
    SessionOut,
    CounterOfferCreate,
    CounterOfferRespond,
    CounterOfferOut,
    CompletionRequestCreate,
    CompletionResolve,
    CompletionRequestOut,
    ProgressUpdate,
    ProgressOut,
    CancelRequestCreate,
    CancelRespond,
    DisputeResolve,
    CancelRequestOut,
)
from .meeting import (
    MeetingCreate,
    MeetingRespond,
    MeetingCancel,
    MeetingOut,
    CancelMeetingOut,
)
from .report import ReportCreate, ReportResolve, ReportAction, ReportOut
from .notification import NotificationOut

__all__ = [
    "Token",
    "TokenData",
    "LoginRequest",
    "RegisterRequest",
    "UserOut",
    "SessionCreate",
    "SessionOut",
    "CounterOfferCreate",
    "CounterOfferRespond",
    "CounterOfferOut",
    "CompletionRequestCreate",
    "CompletionResolve",
    "CompletionRequestOut",
    "ProgressUpdate",
    "ProgressOut",
    "CancelRequestCreate",
    "CancelRespond",
    "DisputeResolve",
    "CancelRequestOut",
    "MeetingCreate",
    "MeetingRespond",
    "MeetingCancel",
    "MeetingOut",
    "CancelMeetingOut",
    "ReportCreate",
    "ReportResolve",
    "ReportAction",
    "ReportOut",
    "NotificationOut",
]
