from .base import Repository, SqlRepository
from .sessions import SessionRepository, SqlSessionRepository
from .progress import ProgressRepository, SqlProgressRepository
from .counter_offers import CounterOfferRepository, SqlCounterOfferRepository
from .completions import CompletionRepository, SqlCompletionRepository
from .cancellations import CancelRequestRepository, SqlCancelRequestRepository
from .meetings import MeetingRepository, SqlMeetingRepository
from .reports import ReportRepository, SqlReportRepository
from .directory import UserDirectory, SkillCatalog, SqlUserDirectory, SqlSkillCatalog

__all__ = [
    "Repository",
    "SqlRepository",
    "SessionRepository",
    "SqlSessionRepository",
    "ProgressRepository",
    "SqlProgressRepository",
    "CounterOfferRepository",
    "SqlCounterOfferRepository",
    "CompletionRepository",
    "SqlCompletionRepository",
    "CancelRequestRepository",
    "SqlCancelRequestRepository",
    "MeetingRepository",
    "SqlMeetingRepository",
    "ReportRepository",
    "SqlReportRepository",
    "UserDirectory",
    "SkillCatalog",
    "SqlUserDirectory",
    "SqlSkillCatalog",
]
