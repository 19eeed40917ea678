from sqlalchemy.orm import Session

from skillhub.repositories import (
    SqlCancelRequestRepository,
    SqlCompletionRepository,
    SqlCounterOfferRepository,
    SqlMeetingRepository,
    SqlProgressRepository,
    SqlReportRepository,
    SqlSessionRepository,
    SqlSkillCatalog,
    SqlUserDirectory,
)
from skillhub.services.cancellation_service import CancellationService
from skillhub.services.common import Actor
from skillhub.services.completion_service import CompletionService
from skillhub.services.meeting_service import MeetingService
from skillhub.services.notification_service import SqlNotificationSink
from skillhub.services.report_service import ReportService
from skillhub.services.session_service import SessionService


def build_session_service(db: Session) -> SessionService:
    return SessionService(
        sessions=SqlSessionRepository(db),
        progress=SqlProgressRepository(db),
        users=SqlUserDirectory(db),
        skills=SqlSkillCatalog(db),
        notifier=SqlNotificationSink(db),
        counter_offers=SqlCounterOfferRepository(db),
    )


def build_completion_service(db: Session) -> CompletionService:
    session_service = build_session_service(db)
    return CompletionService(
        session_service,
        SqlCompletionRepository(db),
        session_service.progress,
    )


def build_cancellation_service(db: Session) -> CancellationService:
    return CancellationService(build_session_service(db), SqlCancelRequestRepository(db))


def build_meeting_service(db: Session) -> MeetingService:
    return MeetingService(build_session_service(db), SqlMeetingRepository(db))


def build_report_service(db: Session) -> ReportService:
    return ReportService(build_session_service(db), SqlReportRepository(db))


__all__ = [
    "Actor",
    "SessionService",
    "CompletionService",
    "CancellationService",
    "MeetingService",
    "ReportService",
    "build_session_service",
    "build_completion_service",
    "build_cancellation_service",
    "build_meeting_service",
    "build_report_service",
]
