from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from skillhub.api.deps import get_actor, get_meeting_service
from skillhub.database import get_db
from skillhub.schemas import (
    CancelMeetingOut,
    MeetingCancel,
    MeetingCreate,
    MeetingOut,
    MeetingRespond,
)
from skillhub.services import Actor, MeetingService

router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.get("/", response_model=List[MeetingOut])
def list_meetings(
    other_user_id: Optional[int] = None,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
):
    return service.list_meetings(actor, other_user_id=other_user_id)


@router.get("/cancellations/unacknowledged", response_model=List[CancelMeetingOut])
def list_unacknowledged_cancellations(
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
):
    return service.list_unacknowledged_cancellations(actor)


@router.get("/{meeting_id}", response_model=MeetingOut)
def get_meeting(
    meeting_id: int,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
):
    return service.get_meeting(meeting_id, actor)


@router.post("/", response_model=MeetingOut, status_code=201)
def propose_meeting(
    payload: MeetingCreate,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
    db: Session = Depends(get_db),
):
    meeting = service.propose_meeting(
        actor,
        receiver_id=payload.receiver_id,
        description=payload.description,
        meeting_time=payload.meeting_time,
        session_id=payload.session_id,
    )
    db.commit()
    return meeting


@router.post("/{meeting_id}/respond", response_model=MeetingOut)
def respond_meeting(
    meeting_id: int,
    payload: MeetingRespond,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
    db: Session = Depends(get_db),
):
    meeting = service.respond_meeting(meeting_id, actor, payload.decision)
    db.commit()
    return meeting


@router.post("/{meeting_id}/cancel", response_model=CancelMeetingOut)
def cancel_meeting(
    meeting_id: int,
    payload: MeetingCancel,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
    db: Session = Depends(get_db),
):
    cancellation = service.cancel_meeting(meeting_id, actor, payload.reason)
    db.commit()
    return cancellation


@router.post("/{meeting_id}/cancel/acknowledge", response_model=CancelMeetingOut)
def acknowledge_cancellation(
    meeting_id: int,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
    db: Session = Depends(get_db),
):
    cancellation = service.acknowledge_cancellation(meeting_id, actor)
    db.commit()
    return cancellation


@router.post("/{meeting_id}/complete", response_model=MeetingOut)
def complete_meeting(
    meeting_id: int,
    actor: Actor = Depends(get_actor),
    service: MeetingService = Depends(get_meeting_service),
    db: Session = Depends(get_db),
):
    meeting = service.complete_meeting(meeting_id, actor)
    db.commit()
    return meeting
