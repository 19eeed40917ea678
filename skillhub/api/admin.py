# skillhub/api/admin.py
"""Admin moderation: reports, cancellation disputes and data repair."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skillhub.api.deps import (
    get_actor,
    get_cancellation_service,
    get_report_service,
    get_session_service,
)
from skillhub.database import get_db
from skillhub.schemas import (
    CancelRequestOut,
    DisputeResolve,
    ReportAction,
    ReportOut,
    ReportResolve,
)
from skillhub.services import Actor, CancellationService, ReportService, SessionService

router = APIRouter(prefix="/admin", tags=["Admin"])


# ======================
# REPORTS
# ======================
@router.get("/reports", response_model=List[ReportOut])
def list_reports(
    status: Optional[str] = None,
    actor: Actor = Depends(get_actor),
    service: ReportService = Depends(get_report_service),
):
    return service.list_reports(actor, status=status)


@router.get("/reports/{report_id}", response_model=ReportOut)
def get_report(
    report_id: int,
    actor: Actor = Depends(get_actor),
    service: ReportService = Depends(get_report_service),
):
    return service.get_report(report_id, actor)


@router.post("/reports/{report_id}/open", response_model=ReportOut)
def open_report(
    report_id: int,
    actor: Actor = Depends(get_actor),
    service: ReportService = Depends(get_report_service),
    db: Session = Depends(get_db),
):
    report = service.open_report(report_id, actor)
    db.commit()
    return report


@router.post("/reports/{report_id}/resolve", response_model=ReportOut)
def resolve_report(
    report_id: int,
    payload: ReportResolve,
    actor: Actor = Depends(get_actor),
    service: ReportService = Depends(get_report_service),
    db: Session = Depends(get_db),
):
    report = service.resolve_report(report_id, payload.resolution, actor, notes=payload.notes)
    db.commit()
    return report


@router.post("/reports/{report_id}/action", response_model=ReportOut)
def take_report_action(
    report_id: int,
    payload: ReportAction,
    actor: Actor = Depends(get_actor),
    service: ReportService = Depends(get_report_service),
    db: Session = Depends(get_db),
):
    report = service.take_report_action(report_id, payload.action, actor, payload.admin_message)
    db.commit()
    return report


# ======================
# CANCELLATION DISPUTES
# ======================
@router.get("/disputes", response_model=List[CancelRequestOut])
def list_open_disputes(
    actor: Actor = Depends(get_actor),
    service: CancellationService = Depends(get_cancellation_service),
):
    return service.list_open_disputes(actor)


@router.post("/disputes/{cancel_request_id}/resolve", response_model=CancelRequestOut)
def resolve_dispute(
    cancel_request_id: int,
    payload: DisputeResolve,
    actor: Actor = Depends(get_actor),
    service: CancellationService = Depends(get_cancellation_service),
    db: Session = Depends(get_db),
):
    request = service.resolve_dispute(
        cancel_request_id, actor, resolution=payload.resolution, note=payload.note
    )
    db.commit()
    return request


# ======================
# DATA REPAIR
# ======================
@router.post("/sessions/fix-status")
def fix_status_consistency(
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
    db: Session = Depends(get_db),
):
    repaired = service.fix_status_consistency(actor)
    db.commit()
    return {"message": "Session status consistency pass complete", "repaired": repaired}
