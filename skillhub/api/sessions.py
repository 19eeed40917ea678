# skillhub/api/sessions.py
"""
Session lifecycle API: proposals, acceptance, counter-offers, the
completion handshake, progress and cancellation requests. Every route
runs one service operation and commits the unit of work.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skillhub.api.deps import (
    get_actor,
    get_cancellation_service,
    get_completion_service,
    get_session_service,
)
from skillhub.database import get_db
from skillhub.schemas import (
    CancelRequestCreate,
    CancelRequestOut,
    CancelRespond,
    CompletionRequestCreate,
    CompletionRequestOut,
    CompletionResolve,
    CounterOfferCreate,
    CounterOfferOut,
    CounterOfferRespond,
    ProgressOut,
    ProgressUpdate,
    SessionCreate,
    SessionOut,
)
from skillhub.services import Actor, CancellationService, CompletionService, SessionService

router = APIRouter(prefix="/sessions", tags=["sessions"])


# ======================
# SESSION LISTING
# ======================
@router.get("/", response_model=List[SessionOut])
def list_sessions(
    status: Optional[str] = None,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
):
    """Sessions the current user is a party to, optionally filtered by status."""
    return service.list_sessions(actor, status=status)


@router.get("/{session_id}", response_model=SessionOut)
def get_session(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
):
    return service.get_session(session_id, actor)


# ======================
# PROPOSE / ACCEPT / REJECT
# ======================
@router.post("/", response_model=SessionOut, status_code=201)
def propose_session(
    payload: SessionCreate,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
    db: Session = Depends(get_db),
):
    session = service.propose_session(actor, **payload.model_dump())
    db.commit()
    return session


@router.post("/{session_id}/accept", response_model=SessionOut)
def accept_session(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
    db: Session = Depends(get_db),
):
    session = service.accept_session(session_id, actor)
    db.commit()
    return session


@router.post("/{session_id}/reject", response_model=SessionOut)
def reject_session(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
    db: Session = Depends(get_db),
):
    session = service.reject_session(session_id, actor)
    db.commit()
    return session


# ======================
# COUNTER-OFFERS
# ======================
@router.post("/{session_id}/counter-offers", response_model=CounterOfferOut, status_code=201)
def propose_counter_offer(
    session_id: int,
    payload: CounterOfferCreate,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
    db: Session = Depends(get_db),
):
    offer = service.propose_counter_offer(session_id, actor, **payload.model_dump())
    db.commit()
    return offer


@router.get("/{session_id}/counter-offers", response_model=List[CounterOfferOut])
def list_counter_offers(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
):
    """Counter-offers on the session, newest first."""
    return service.list_counter_offers(session_id, actor)


@router.post("/counter-offers/{counter_offer_id}/respond", response_model=CounterOfferOut)
def respond_counter_offer(
    counter_offer_id: int,
    payload: CounterOfferRespond,
    actor: Actor = Depends(get_actor),
    service: SessionService = Depends(get_session_service),
    db: Session = Depends(get_db),
):
    offer = service.respond_counter_offer(counter_offer_id, actor, payload.decision)
    db.commit()
    return offer


# ======================
# COMPLETION HANDSHAKE
# ======================
@router.post("/{session_id}/completion-requests", response_model=CompletionRequestOut, status_code=201)
def request_completion(
    session_id: int,
    payload: Optional[CompletionRequestCreate] = None,
    actor: Actor = Depends(get_actor),
    service: CompletionService = Depends(get_completion_service),
    db: Session = Depends(get_db),
):
    target = payload.request_for_user if payload else "both"
    request = service.request_completion(session_id, actor, request_for_user=target)
    db.commit()
    return request


@router.get("/{session_id}/completion-requests", response_model=List[CompletionRequestOut])
def list_completion_requests(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: CompletionService = Depends(get_completion_service),
):
    return service.list_completion_requests(session_id, actor)


@router.post("/completion-requests/{request_id}/resolve", response_model=CompletionRequestOut)
def resolve_completion_request(
    request_id: int,
    payload: CompletionResolve,
    actor: Actor = Depends(get_actor),
    service: CompletionService = Depends(get_completion_service),
    db: Session = Depends(get_db),
):
    request = service.resolve_completion_request(
        request_id, payload.decision, actor, rejection_reason=payload.rejection_reason
    )
    db.commit()
    return request


# ======================
# PROGRESS
# ======================
@router.get("/{session_id}/progress", response_model=List[ProgressOut])
def get_progress(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: CompletionService = Depends(get_completion_service),
):
    return service.get_progress(session_id, actor)


@router.put("/{session_id}/progress/{user_id}", response_model=ProgressOut)
def update_progress(
    session_id: int,
    user_id: int,
    payload: ProgressUpdate,
    actor: Actor = Depends(get_actor),
    service: CompletionService = Depends(get_completion_service),
    db: Session = Depends(get_db),
):
    progress = service.update_progress(
        session_id,
        user_id,
        actor,
        completion_percentage=payload.completion_percentage,
        status=payload.status,
        notes=payload.notes,
    )
    db.commit()
    return progress


# ======================
# CANCELLATION
# ======================
@router.post("/{session_id}/cancel-request", response_model=CancelRequestOut, status_code=201)
def request_cancellation(
    session_id: int,
    payload: CancelRequestCreate,
    actor: Actor = Depends(get_actor),
    service: CancellationService = Depends(get_cancellation_service),
    db: Session = Depends(get_db),
):
    request = service.request_cancellation(
        session_id,
        actor,
        reason=payload.reason,
        description=payload.description,
        evidence_files=payload.evidence_files,
    )
    db.commit()
    return request


@router.get("/{session_id}/cancel-request", response_model=Optional[CancelRequestOut])
def get_cancellation(
    session_id: int,
    actor: Actor = Depends(get_actor),
    service: CancellationService = Depends(get_cancellation_service),
):
    return service.get_cancellation(session_id, actor)


@router.post("/{session_id}/cancel-request/respond", response_model=CancelRequestOut)
def respond_cancellation(
    session_id: int,
    payload: CancelRespond,
    actor: Actor = Depends(get_actor),
    service: CancellationService = Depends(get_cancellation_service),
    db: Session = Depends(get_db),
):
    request = service.respond_cancellation(
        session_id,
        actor,
        action=payload.action,
        response_description=payload.response_description,
        response_evidence_files=payload.response_evidence_files,
        work_completion_percentage=payload.work_completion_percentage,
    )
    db.commit()
    return request
