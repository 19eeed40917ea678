# skillhub/services/completion_service.py
"""
Completion & Progress Tracker

A session is completed only through the two-sided handshake: each party
raises a completion request and the other party approves it. Progress rows
are advisory telemetry and never move the session status.
"""

import logging
from typing import List, Optional

from skillhub.errors import Forbidden, NotFound, PreconditionFailed, ValidationError
from skillhub.models.completion import (
    CompletionStatus,
    CompletionTarget,
    SessionCompletionRequest,
)
from skillhub.models.progress import ProgressStatus, SessionProgress
from skillhub.models.session import Session, SessionStatus
from skillhub.repositories import CompletionRepository, ProgressRepository
from skillhub.services.common import Actor, require_choice, require_id, utcnow
from skillhub.services.session_service import SessionService

logger = logging.getLogger(__name__)

COMPLETION_DECISIONS = (CompletionStatus.APPROVED, CompletionStatus.REJECTED)


def clamp_percentage(value) -> int:
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        raise ValidationError(
            "completion_percentage must be a number", field="completion_percentage"
        )
    return max(0, min(100, number))


class CompletionService:

    def __init__(
        self,
        session_service: SessionService,
        completions: CompletionRepository,
        progress: ProgressRepository,
    ):
        self.session_service = session_service
        self.sessions = session_service.sessions
        self.completions = completions
        self.progress = progress

    def _party_session(self, session_id, actor: Actor) -> Session:
        session = self.session_service.get_session_or_404(session_id)
        if not session.has_party(actor.user_id) and not actor.is_admin:
            raise Forbidden("User is not part of this session")
        return session

    # ======================
    # COMPLETION HANDSHAKE
    # ======================
    def request_completion(
        self,
        session_id,
        actor: Actor,
        request_for_user: str = CompletionTarget.BOTH.value,
    ) -> SessionCompletionRequest:
        session = self.session_service.get_session_or_404(session_id)
        if not session.has_party(actor.user_id):
            raise Forbidden("User is not part of this session")
        target = require_choice(request_for_user, CompletionTarget, "request_for_user")

        if session.status != SessionStatus.ACTIVE:
            raise PreconditionFailed(
                "Session must be active to request completion", state=session.status
            )
        if self.completions.find_pending(session.id, actor.user_id) is not None:
            raise PreconditionFailed(
                "You already have a pending completion request for this session",
                state=CompletionStatus.PENDING.value,
            )

        request = self.completions.add(SessionCompletionRequest(
            session_id=session.id,
            requested_by=actor.user_id,
            request_for_user=target,
            status=CompletionStatus.PENDING.value,
        ))
        logger.info(
            "Completion request %s raised on session %s by %s",
            request.id, session.id, actor.user_id,
        )

        self.session_service.notify(
            "completion_requested",
            recipient_id=session.counterparty_of(actor.user_id),
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.session_service.display_name(actor.user_id)} requested to mark the session as completed.",
        )
        return request

    def resolve_completion_request(
        self,
        request_id,
        decision: str,
        actor: Actor,
        rejection_reason: Optional[str] = None,
    ) -> SessionCompletionRequest:
        request_id = require_id(request_id, "request_id")
        decision = require_choice(decision, COMPLETION_DECISIONS, "decision")

        request = self.completions.get(request_id)
        if request is None:
            raise NotFound("Completion request not found")
        session = self.session_service.get_session_or_404(request.session_id)

        if not actor.is_admin:
            if not session.has_party(actor.user_id):
                raise Forbidden("User is not part of this session")
            if actor.user_id == request.requested_by:
                raise Forbidden("You cannot resolve your own completion request")

        now = utcnow()
        if decision == CompletionStatus.APPROVED.value:
            changes = {
                "status": CompletionStatus.APPROVED.value,
                "approved_by": actor.user_id,
                "approved_at": now,
            }
        else:
            reason = (rejection_reason or "").strip()
            if not reason:
                raise ValidationError(
                    "rejection_reason is required when rejecting", field="rejection_reason"
                )
            changes = {
                "status": CompletionStatus.REJECTED.value,
                "rejected_by": actor.user_id,
                "rejected_at": now,
                "rejection_reason": reason,
            }

        won = self.completions.compare_and_set(
            request.id, {"status": (CompletionStatus.PENDING,)}, **changes
        )
        if not won:
            current = self.completions.get(request.id)
            raise PreconditionFailed(
                "Completion request has already been resolved",
                state=current.status if current else None,
            )
        request = self.completions.get(request.id)
        logger.info("Completion request %s -> %s", request.id, decision)

        self.session_service.notify(
            f"completion_{decision}",
            recipient_id=request.requested_by,
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.session_service.display_name(actor.user_id)} {decision} your completion request.",
        )

        if decision == CompletionStatus.APPROVED.value:
            self._complete_if_both_approved(session, actor)
        return request

    def _complete_if_both_approved(self, session: Session, actor: Actor) -> bool:
        # Serializes concurrent approvals: the second one waits here and then
        # reads the first one's committed approval.
        self.sessions.lock(session.id)
        approved = self.completions.approved_requesters(session.id)
        if not set(session.party_ids()) <= approved:
            logger.info(
                "Session %s partially approved (%s of 2)", session.id, len(approved)
            )
            return False

        try:
            self.session_service.transition(
                session, (SessionStatus.ACTIVE,), SessionStatus.COMPLETED
            )
        except PreconditionFailed:
            current = self.sessions.get(session.id)
            if current is not None and current.status == SessionStatus.COMPLETED:
                return True
            raise

        for user_id in session.party_ids():
            self.session_service.notify(
                "session_completed",
                recipient_id=user_id,
                actor_id=actor.user_id,
                session_id=session.id,
                message="Both parties approved completion. The session is now completed.",
            )
        return True

    def list_completion_requests(self, session_id, actor: Actor) -> List[SessionCompletionRequest]:
        session = self._party_session(session_id, actor)
        return self.completions.list_for_session(session.id)

    # ======================
    # PROGRESS
    # ======================
    def update_progress(
        self,
        session_id,
        user_id,
        actor: Actor,
        *,
        completion_percentage=None,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> SessionProgress:
        user_id = require_id(user_id, "user_id")
        session = self.session_service.get_session_or_404(session_id)
        if actor.user_id != user_id and not actor.is_admin:
            raise Forbidden("You can only update your own progress")
        if not session.has_party(user_id):
            raise Forbidden("User is not part of this session")

        progress = self.progress.find(session.id, user_id)
        if progress is None:
            progress = SessionProgress(
                session_id=session.id,
                user_id=user_id,
                start_date=session.start_date,
                completion_percentage=0,
                status=ProgressStatus.NOT_STARTED.value,
                notes="",
            )
            progress = self.progress.add(progress)

        if completion_percentage is not None:
            progress.completion_percentage = clamp_percentage(completion_percentage)
        if status is not None:
            progress.status = require_choice(status, ProgressStatus, "status")
        if notes is not None:
            progress.notes = notes
        progress.updated_at = utcnow()
        return self.progress.save(progress)

    def get_progress(self, session_id, actor: Actor) -> List[SessionProgress]:
        session = self._party_session(session_id, actor)
        return self.progress.list_for_session(session.id)
