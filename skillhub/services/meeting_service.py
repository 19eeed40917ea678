# skillhub/services/meeting_service.py
"""
Meeting scheduling sub-flow.

    pending  -> accepted | rejected | cancelled
    accepted -> cancelled | completed
    rejected, completed are terminal

A cancellation writes a CancelMeeting record that the other party has to
acknowledge.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from skillhub.config import settings
from skillhub.errors import Forbidden, NotFound, PreconditionFailed, ValidationError
from skillhub.models.meeting import CancelMeeting, Meeting, MeetingState
from skillhub.models.session import SessionStatus
from skillhub.repositories import MeetingRepository
from skillhub.services.common import Actor, require_choice, require_id, require_text, utcnow
from skillhub.services.session_service import SessionService

logger = logging.getLogger(__name__)

MEETING_DECISIONS = ("accept", "reject")


def build_meeting_link() -> str:
    base = settings.MEETING_LINK_BASE_URL.rstrip("/")
    prefix = settings.MEETING_LINK_PREFIX or "meeting"
    return f"{base}/{prefix}-{uuid.uuid4().hex[:12]}"


class MeetingService:

    def __init__(self, session_service: SessionService, meetings: MeetingRepository):
        self.session_service = session_service
        self.meetings = meetings

    def _get_meeting(self, meeting_id) -> Meeting:
        meeting_id = require_id(meeting_id, "meeting_id")
        meeting = self.meetings.get(meeting_id)
        if meeting is None:
            raise NotFound("Meeting not found")
        return meeting

    def _transition(self, meeting: Meeting, expected, new_state: MeetingState, **changes) -> Meeting:
        won = self.meetings.compare_and_set(
            meeting.id,
            {"state": tuple(expected)},
            state=new_state.value,
            updated_at=utcnow(),
            **changes,
        )
        if not won:
            current = self.meetings.get(meeting.id)
            raise PreconditionFailed(
                f"Meeting cannot move to {new_state.value}",
                state=current.state if current else None,
            )
        logger.info("Meeting %s -> %s", meeting.id, new_state.value)
        return self.meetings.get(meeting.id)

    def propose_meeting(
        self,
        actor: Actor,
        *,
        receiver_id,
        description: Optional[str],
        meeting_time: Optional[datetime],
        session_id=None,
    ) -> Meeting:
        sender_id = require_id(actor.user_id, "sender_id")
        receiver_id = require_id(receiver_id, "receiver_id")
        description = require_text(description, "description", max_length=2000)
        if meeting_time is None:
            raise ValidationError("meeting_time is required", field="meeting_time")
        if sender_id == receiver_id:
            raise ValidationError("Cannot schedule a meeting with yourself", field="receiver_id")
        if self.session_service.users.get(receiver_id) is None:
            raise NotFound("Receiving user not found", field="receiver_id")

        if session_id is not None:
            session = self.session_service.get_session_or_404(session_id)
            if not (session.has_party(sender_id) and session.has_party(receiver_id)):
                raise Forbidden("Both users must be parties of the session")
            if session.status != SessionStatus.ACTIVE:
                raise PreconditionFailed(
                    "Meetings can only be scheduled for active sessions", state=session.status
                )
            session_id = session.id

        meeting = self.meetings.add(Meeting(
            session_id=session_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            description=description,
            meeting_time=meeting_time,
            accept_status=False,
            state=MeetingState.PENDING.value,
        ))
        logger.info("Meeting %s proposed by %s to %s", meeting.id, sender_id, receiver_id)

        self.session_service.notify(
            "meeting_proposed",
            recipient_id=receiver_id,
            actor_id=sender_id,
            session_id=session_id,
            message=f"{self.session_service.display_name(sender_id)} invited you to a meeting.",
        )
        return meeting

    def respond_meeting(self, meeting_id, actor: Actor, decision: str) -> Meeting:
        meeting = self._get_meeting(meeting_id)
        if actor.user_id != meeting.receiver_id:
            raise Forbidden("Only the invited user can respond to this meeting")
        decision = require_choice(decision, MEETING_DECISIONS, "decision")

        if decision == "accept":
            meeting = self._transition(
                meeting,
                (MeetingState.PENDING,),
                MeetingState.ACCEPTED,
                accept_status=True,
                meeting_link=build_meeting_link(),
            )
            event_type, verb = "meeting_accepted", "accepted"
        else:
            meeting = self._transition(meeting, (MeetingState.PENDING,), MeetingState.REJECTED)
            event_type, verb = "meeting_rejected", "declined"

        self.session_service.notify(
            event_type,
            recipient_id=meeting.sender_id,
            actor_id=actor.user_id,
            session_id=meeting.session_id,
            message=f"{self.session_service.display_name(actor.user_id)} {verb} your meeting invitation.",
        )
        return meeting

    def cancel_meeting(self, meeting_id, actor: Actor, reason: Optional[str]) -> CancelMeeting:
        meeting = self._get_meeting(meeting_id)
        if not meeting.has_party(actor.user_id):
            raise Forbidden("User is not part of this meeting")
        reason = require_text(reason, "reason", max_length=1000)

        self._transition(
            meeting,
            (MeetingState.PENDING, MeetingState.ACCEPTED),
            MeetingState.CANCELLED,
        )
        cancellation = self.meetings.add_cancellation(CancelMeeting(
            meeting_id=meeting.id,
            cancelled_by=actor.user_id,
            reason=reason,
            acknowledged=False,
            cancelled_at=utcnow(),
        ))

        self.session_service.notify(
            "meeting_cancelled",
            recipient_id=meeting.counterparty_of(actor.user_id),
            actor_id=actor.user_id,
            session_id=meeting.session_id,
            message=(
                f"{self.session_service.display_name(actor.user_id)} cancelled your meeting. "
                f"Reason: {reason}"
            ),
        )
        return cancellation

    def acknowledge_cancellation(self, meeting_id, actor: Actor) -> CancelMeeting:
        meeting = self._get_meeting(meeting_id)
        if not meeting.has_party(actor.user_id):
            raise Forbidden("User is not part of this meeting")
        cancellation = self.meetings.get_cancellation(meeting.id)
        if cancellation is None:
            raise NotFound("Meeting has no cancellation to acknowledge")

        if cancellation.acknowledged:
            return cancellation
        if actor.user_id == cancellation.cancelled_by:
            raise Forbidden("The cancelling user cannot acknowledge their own cancellation")

        won = self.meetings.acknowledge_cancellation(
            cancellation.id,
            acknowledged=True,
            acknowledged_by=actor.user_id,
            acknowledged_at=utcnow(),
        )
        if won:
            logger.info("Meeting %s cancellation acknowledged by %s", meeting.id, actor.user_id)
        return self.meetings.get_cancellation(meeting.id)

    def complete_meeting(self, meeting_id, actor: Actor) -> Meeting:
        meeting = self._get_meeting(meeting_id)
        if not meeting.has_party(actor.user_id):
            raise Forbidden("User is not part of this meeting")
        meeting = self._transition(meeting, (MeetingState.ACCEPTED,), MeetingState.COMPLETED)
        self.session_service.notify(
            "meeting_completed",
            recipient_id=meeting.counterparty_of(actor.user_id),
            actor_id=actor.user_id,
            session_id=meeting.session_id,
            message="Your meeting was marked as completed.",
        )
        return meeting

    def get_meeting(self, meeting_id, actor: Actor) -> Meeting:
        meeting = self._get_meeting(meeting_id)
        if not meeting.has_party(actor.user_id) and not actor.is_admin:
            raise Forbidden("User is not part of this meeting")
        return meeting

    def list_meetings(self, actor: Actor, other_user_id=None) -> List[Meeting]:
        if other_user_id is not None:
            other_user_id = require_id(other_user_id, "other_user_id")
        return self.meetings.list_for_user(actor.user_id, other_user_id=other_user_id)

    def list_unacknowledged_cancellations(self, actor: Actor) -> List[CancelMeeting]:
        return self.meetings.list_unacknowledged_for(actor.user_id)
