"""FastAPI dependencies: current actor plus services bound to the request's DB session."""

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from skillhub import models
from skillhub.database import get_db
from skillhub.services import (
    Actor,
    CancellationService,
    CompletionService,
    MeetingService,
    ReportService,
    SessionService,
    build_cancellation_service,
    build_completion_service,
    build_meeting_service,
    build_report_service,
    build_session_service,
)
from skillhub.utils.security import get_current_user


def get_actor(current_user: models.User = Depends(get_current_user)) -> Actor:
    if current_user.is_blocked:
        raise HTTPException(status_code=403, detail="Account is blocked")
    return Actor(user_id=current_user.id, is_admin=current_user.is_admin)


def get_session_service(db: Session = Depends(get_db)) -> SessionService:
    return build_session_service(db)


def get_completion_service(db: Session = Depends(get_db)) -> CompletionService:
    return build_completion_service(db)


def get_cancellation_service(db: Session = Depends(get_db)) -> CancellationService:
    return build_cancellation_service(db)


def get_meeting_service(db: Session = Depends(get_db)) -> MeetingService:
    return build_meeting_service(db)


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return build_report_service(db)
