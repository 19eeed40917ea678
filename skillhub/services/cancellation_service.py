# skillhub/services/cancellation_service.py
"""
Session cancellation and dispute resolution.

One party asks to cancel an active session; the other party either agrees
(session canceled) or disputes (session disputed). A disputed cancellation
is settled by an admin, which returns the session to active or cancels it.
"""

import logging
from typing import List, Optional, Sequence

from skillhub.errors import Forbidden, NotFound, PreconditionFailed, ValidationError
from skillhub.models.cancellation import (
    CancelResolution,
    CancelResponseStatus,
    SessionCancelRequest,
)
from skillhub.models.session import SessionStatus
from skillhub.repositories import CancelRequestRepository
from skillhub.services.common import (
    Actor,
    require_admin,
    require_choice,
    require_id,
    require_text,
    utcnow,
)
from skillhub.services.completion_service import clamp_percentage
from skillhub.services.session_service import SessionService

logger = logging.getLogger(__name__)

RESPONSE_ACTIONS = ("agree", "dispute")
DISPUTE_RESOLUTIONS = (
    CancelResolution.CANCELED,
    CancelResolution.PARTIAL_COMPLETION,
    CancelResolution.CONTINUED,
)


class CancellationService:

    def __init__(self, session_service: SessionService, cancel_requests: CancelRequestRepository):
        self.session_service = session_service
        self.cancel_requests = cancel_requests

    def request_cancellation(
        self,
        session_id,
        actor: Actor,
        *,
        reason: Optional[str],
        description: Optional[str],
        evidence_files: Optional[Sequence[str]] = None,
    ) -> SessionCancelRequest:
        session = self.session_service.get_session_or_404(session_id)
        if not session.has_party(actor.user_id):
            raise Forbidden("User is not a participant in this session")
        reason = require_text(reason, "reason", max_length=100)
        description = require_text(description, "description", max_length=2000)

        if session.status != SessionStatus.ACTIVE:
            raise PreconditionFailed("Can only cancel active sessions", state=session.status)
        if self.cancel_requests.find_open(session.id) is not None:
            raise PreconditionFailed(
                "There is already a pending cancellation request for this session",
                state=CancelResolution.PENDING.value,
            )

        request = self.cancel_requests.add(SessionCancelRequest(
            session_id=session.id,
            initiator_id=actor.user_id,
            reason=reason,
            description=description,
            evidence_files=list(evidence_files or []),
            response_status=CancelResponseStatus.PENDING.value,
            resolution=CancelResolution.PENDING.value,
        ))
        logger.info("Cancel request %s opened on session %s", request.id, session.id)

        self.session_service.notify(
            "cancel_requested",
            recipient_id=session.counterparty_of(actor.user_id),
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.session_service.display_name(actor.user_id)} asked to cancel the session.",
        )
        return request

    def get_cancellation(self, session_id, actor: Actor) -> Optional[SessionCancelRequest]:
        session = self.session_service.get_session(session_id, actor)
        return self.cancel_requests.latest_for_session(session.id)

    def respond_cancellation(
        self,
        session_id,
        actor: Actor,
        *,
        action: str,
        response_description: Optional[str] = None,
        response_evidence_files: Optional[Sequence[str]] = None,
        work_completion_percentage=None,
    ) -> SessionCancelRequest:
        action = require_choice(action, RESPONSE_ACTIONS, "action")
        session = self.session_service.get_session_or_404(session_id)
        request = self.cancel_requests.find_open(session.id)
        if request is None:
            raise NotFound("No pending cancellation request found")
        if actor.user_id != session.counterparty_of(request.initiator_id):
            raise Forbidden("Only the other participant can respond to this cancellation request")

        now = utcnow()
        changes = {
            "responder_id": actor.user_id,
            "response_description": (response_description or "").strip() or None,
            "response_evidence_files": list(response_evidence_files or []),
            "responded_at": now,
        }
        if work_completion_percentage is not None:
            changes["work_completion_percentage"] = clamp_percentage(work_completion_percentage)

        if action == "agree":
            changes.update(
                response_status=CancelResponseStatus.AGREED.value,
                resolution=CancelResolution.CANCELED.value,
                resolved_by=actor.user_id,
                resolved_at=now,
            )
            next_status = SessionStatus.CANCELED
            event_type = "cancel_agreed"
            verb = "agreed to cancel"
        else:
            changes["response_status"] = CancelResponseStatus.DISPUTED.value
            next_status = SessionStatus.DISPUTED
            event_type = "cancel_disputed"
            verb = "disputed the cancellation of"

        # Session first: if it is no longer active the request stays untouched.
        self.session_service.transition(session, (SessionStatus.ACTIVE,), next_status)
        won = self.cancel_requests.compare_and_set(
            request.id,
            {
                "response_status": (CancelResponseStatus.PENDING,),
                "resolution": (CancelResolution.PENDING,),
            },
            **changes,
        )
        if not won:
            raise PreconditionFailed("Cancellation request has already been answered")
        request = self.cancel_requests.get(request.id)
        logger.info("Cancel request %s answered: %s", request.id, action)

        self.session_service.notify(
            event_type,
            recipient_id=request.initiator_id,
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.session_service.display_name(actor.user_id)} {verb} the session.",
        )
        return request

    # ======================
    # ADMIN DISPUTE RESOLUTION
    # ======================
    def list_open_disputes(self, actor: Actor) -> List[SessionCancelRequest]:
        require_admin(actor)
        return self.cancel_requests.list_disputed()

    def resolve_dispute(
        self,
        cancel_request_id,
        actor: Actor,
        *,
        resolution: str,
        note: Optional[str] = None,
    ) -> SessionCancelRequest:
        require_admin(actor)
        cancel_request_id = require_id(cancel_request_id, "cancel_request_id")
        resolution = require_choice(resolution, DISPUTE_RESOLUTIONS, "resolution")

        request = self.cancel_requests.get(cancel_request_id)
        if request is None:
            raise NotFound("Cancellation request not found")
        if request.response_status != CancelResponseStatus.DISPUTED \
                or request.resolution != CancelResolution.PENDING:
            raise PreconditionFailed(
                "Only open disputes can be resolved", state=request.resolution
            )
        if note is not None and len(note) > 2000:
            raise ValidationError("note must be 2000 characters or less", field="note")

        session = self.session_service.get_session_or_404(request.session_id)
        if resolution == CancelResolution.CONTINUED.value:
            next_status = SessionStatus.ACTIVE
        else:
            next_status = SessionStatus.CANCELED

        # Session first: a lost transition leaves the request untouched
        self.session_service.transition(session, (SessionStatus.DISPUTED,), next_status)
        won = self.cancel_requests.compare_and_set(
            request.id,
            {
                "response_status": (CancelResponseStatus.DISPUTED,),
                "resolution": (CancelResolution.PENDING,),
            },
            resolution=resolution,
            resolved_by=actor.user_id,
            resolution_note=(note or "").strip() or None,
            resolved_at=utcnow(),
        )
        if not won:
            raise PreconditionFailed("Dispute has already been resolved")
        request = self.cancel_requests.get(request.id)
        logger.info(
            "Dispute on session %s resolved as %s by admin %s",
            session.id, resolution, actor.user_id,
        )

        for user_id in session.party_ids():
            self.session_service.notify(
                "dispute_resolved",
                recipient_id=user_id,
                actor_id=actor.user_id,
                session_id=session.id,
                message=f"An admin resolved the cancellation dispute: {resolution.replace('_', ' ')}.",
            )
        return request
