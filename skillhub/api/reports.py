from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skillhub.api.deps import get_actor, get_report_service
from skillhub.database import get_db
from skillhub.schemas import ReportCreate, ReportOut
from skillhub.services import Actor, ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/", response_model=ReportOut, status_code=201)
def file_report(
    payload: ReportCreate,
    actor: Actor = Depends(get_actor),
    service: ReportService = Depends(get_report_service),
    db: Session = Depends(get_db),
):
    """Report the other party of a session to the moderators."""
    report = service.file_report(
        actor,
        session_id=payload.session_id,
        reported_user_id=payload.reported_user_id,
        reason=payload.reason,
        description=payload.description,
        evidence_files=payload.evidence_files,
    )
    db.commit()
    return report
