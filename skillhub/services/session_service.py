# skillhub/services/session_service.py
"""
Session State Machine

Governs the lifecycle of a two-party skill exchange:

    pending  -> active | canceled      (accept / reject, or answer a counter-offer)
    active   -> completed | disputed | canceled
    disputed -> active | canceled
    completed, canceled are terminal

``status`` is authoritative. ``is_accepted`` is only ever written in the
same conditional UPDATE as ``status`` (see ``transition``), so normal
operation cannot drift the two apart; ``fix_status_consistency`` heals
rows written by older code paths.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from skillhub.config import settings
from skillhub.errors import (
    CapacityExceeded,
    Forbidden,
    NotFound,
    PreconditionFailed,
    ValidationError,
)
from skillhub.models.counter_offer import CounterOfferStatus, SessionCounterOffer
from skillhub.models.progress import SessionProgress, ProgressStatus
from skillhub.models.session import ACCEPTED_STATUSES, Session, SessionStatus
from skillhub.repositories import (
    CounterOfferRepository,
    ProgressRepository,
    SessionRepository,
    SkillCatalog,
    UserDirectory,
)
from skillhub.services.common import (
    Actor,
    as_utc,
    require_admin,
    require_choice,
    require_id,
    require_text,
    utcnow,
)
from skillhub.services.notification_service import NotificationSink

logger = logging.getLogger(__name__)

COUNTER_OFFER_DECISIONS = ("accept", "reject")
COUNTER_OFFER_MESSAGE_MAX_LENGTH = 2000


def expected_status_for(is_accepted: Optional[bool], status: Optional[str]) -> str:
    """Status a session must hold given its acceptance flag."""
    if is_accepted is None:
        return SessionStatus.PENDING.value
    if is_accepted is False:
        return SessionStatus.CANCELED.value
    if status in [s.value for s in ACCEPTED_STATUSES]:
        return status
    return SessionStatus.ACTIVE.value


def check_schedule(start_date: Optional[datetime], expected_end_date: Optional[datetime]) -> None:
    """Naive datetimes are read as UTC so mixed inputs compare cleanly."""
    if start_date is None:
        raise ValidationError("start_date is required", field="start_date")
    if expected_end_date is not None and as_utc(expected_end_date) < as_utc(start_date):
        raise ValidationError(
            "expected_end_date must not be before start_date",
            field="expected_end_date",
        )


class SessionService:

    def __init__(
        self,
        sessions: SessionRepository,
        progress: ProgressRepository,
        users: UserDirectory,
        skills: SkillCatalog,
        notifier: NotificationSink,
        counter_offers: CounterOfferRepository,
        *,
        max_pending_per_pair: Optional[int] = None,
        progress_due_days: Optional[int] = None,
    ):
        self.sessions = sessions
        self.progress = progress
        self.users = users
        self.skills = skills
        self.notifier = notifier
        self.counter_offers = counter_offers
        self.max_pending_per_pair = (
            max_pending_per_pair
            if max_pending_per_pair is not None
            else settings.MAX_PENDING_PROPOSALS_PER_PAIR
        )
        self.progress_due_days = (
            progress_due_days
            if progress_due_days is not None
            else settings.PROGRESS_DUE_DAYS
        )

    # ======================
    # HELPERS
    # ======================
    def display_name(self, user_id: int) -> str:
        user = self.users.get(user_id)
        if user is None:
            return "A user"
        return user.full_name or "A user"

    def notify(self, event_type: str, recipient_id: int, actor_id: Optional[int],
                session_id: Optional[int], message: str) -> None:
        self.notifier.emit(
            event_type,
            recipient_id=recipient_id,
            actor_id=actor_id,
            session_id=session_id,
            message=message,
        )

    def transition(
        self,
        session: Session,
        expected: Iterable[SessionStatus],
        new_status: SessionStatus,
        **changes,
    ) -> Session:
        """Conditional write: apply ``new_status`` only from ``expected``."""
        expected = tuple(expected)
        won = self.sessions.compare_and_set(
            session.id,
            {"status": expected},
            status=new_status.value,
            updated_at=utcnow(),
            **changes,
        )
        if not won:
            current = self.sessions.get(session.id)
            state = current.status if current else None
            logger.info(
                "Session %s transition to %s lost (found %s)",
                session.id, new_status.value, state,
            )
            raise PreconditionFailed(
                f"Session is no longer {'/'.join(s.value for s in expected)}",
                state=state,
            )
        logger.info("Session %s -> %s", session.id, new_status.value)
        return self.sessions.get(session.id)

    def get_session_or_404(self, session_id) -> Session:
        session_id = require_id(session_id, "session_id")
        session = self.sessions.get(session_id)
        if session is None:
            raise NotFound("Session not found")
        return session

    def _require_party(self, session: Session, actor: Actor) -> None:
        if not session.has_party(actor.user_id):
            raise Forbidden("User is not part of this session")

    def _require_skills(self, skill1_id: int, skill2_id: int) -> None:
        for field, skill_id in (("skill1_id", skill1_id), ("skill2_id", skill2_id)):
            if self.skills.get(skill_id) is None:
                raise NotFound(f"Skill {skill_id} not found", field=field)

    def _open_progress(self, session: Session, due_date: Optional[datetime]) -> None:
        for user_id in session.party_ids():
            if self.progress.find(session.id, user_id) is None:
                self.progress.add(SessionProgress(
                    session_id=session.id,
                    user_id=user_id,
                    start_date=session.start_date,
                    due_date=due_date,
                    completion_percentage=0,
                    status=ProgressStatus.NOT_STARTED.value,
                    notes="",
                ))

    # ======================
    # PROPOSE
    # ======================
    def propose_session(
        self,
        actor: Actor,
        *,
        user2_id,
        skill1_id,
        description_of_service1: Optional[str],
        skill2_id,
        description_of_service2: Optional[str],
        start_date: Optional[datetime],
        expected_end_date: Optional[datetime] = None,
    ) -> Session:
        user1_id = require_id(actor.user_id, "user1_id")
        user2_id = require_id(user2_id, "user2_id")
        skill1_id = require_id(skill1_id, "skill1_id")
        skill2_id = require_id(skill2_id, "skill2_id")
        desc1 = require_text(description_of_service1, "description_of_service1")
        desc2 = require_text(description_of_service2, "description_of_service2")
        check_schedule(start_date, expected_end_date)
        if user1_id == user2_id:
            raise ValidationError("Cannot create a session with yourself", field="user2_id")

        # Locking the proposer serializes their proposals, so the pending
        # count below still holds when the new row is inserted
        proposer = self.users.get_for_update(user1_id)
        if proposer is None:
            raise NotFound("Proposing user not found")
        if proposer.is_blocked or proposer.is_suspended:
            raise Forbidden("Blocked or suspended users cannot propose sessions")
        if self.users.get(user2_id) is None:
            raise NotFound("Counterparty user not found", field="user2_id")
        self._require_skills(skill1_id, skill2_id)

        pending = self.sessions.count_pending_between(user1_id, user2_id)
        if pending >= self.max_pending_per_pair:
            logger.info(
                "Proposal %s -> %s rejected: %s pending", user1_id, user2_id, pending
            )
            raise CapacityExceeded(
                f"You already have {pending} pending session proposals with this user "
                f"(limit {self.max_pending_per_pair})",
                state=SessionStatus.PENDING.value,
            )

        session = Session(
            user1_id=user1_id,
            user2_id=user2_id,
            skill1_id=skill1_id,
            description_of_service1=desc1,
            skill2_id=skill2_id,
            description_of_service2=desc2,
            start_date=start_date,
            expected_end_date=expected_end_date,
            is_accepted=None,
            is_amended=False,
            status=SessionStatus.PENDING.value,
        )
        session = self.sessions.add(session)
        logger.info("Session %s proposed by %s to %s", session.id, user1_id, user2_id)

        self.notify(
            "session_proposed",
            recipient_id=user2_id,
            actor_id=user1_id,
            session_id=session.id,
            message=f"{self.display_name(user1_id)} proposed a skill swap with you.",
        )
        return session

    # ======================
    # ACCEPT / REJECT
    # ======================
    def _require_receiver(self, session: Session, actor: Actor, verb: str) -> None:
        self._require_party(session, actor)
        if actor.user_id != session.user2_id:
            raise Forbidden(f"Only the receiving party can {verb} this session")

    def accept_session(self, session_id, actor: Actor) -> Session:
        session = self.get_session_or_404(session_id)
        self._require_receiver(session, actor, "accept")

        session = self.transition(
            session,
            (SessionStatus.PENDING,),
            SessionStatus.ACTIVE,
            is_accepted=True,
        )

        due_date = None
        if session.start_date is not None:
            due_date = session.start_date + timedelta(days=self.progress_due_days)
        self._open_progress(session, due_date)

        self.notify(
            "session_accepted",
            recipient_id=session.user1_id,
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.display_name(actor.user_id)} accepted your session request.",
        )
        return session

    def reject_session(self, session_id, actor: Actor) -> Session:
        session = self.get_session_or_404(session_id)
        self._require_receiver(session, actor, "reject")

        if session.is_accepted is False and session.status == SessionStatus.CANCELED:
            logger.info("Session %s already rejected; no-op", session.id)
            return session

        try:
            session = self.transition(
                session,
                (SessionStatus.PENDING,),
                SessionStatus.CANCELED,
                is_accepted=False,
            )
        except PreconditionFailed:
            # A concurrent reject may have won; the end state is the same.
            current = self.sessions.get(session.id)
            if current is not None and current.is_accepted is False \
                    and current.status == SessionStatus.CANCELED:
                return current
            raise

        self.notify(
            "session_rejected",
            recipient_id=session.user1_id,
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.display_name(actor.user_id)} declined your session request.",
        )
        return session

    # ======================
    # COUNTER-OFFERS
    # ======================
    def propose_counter_offer(
        self,
        session_id,
        actor: Actor,
        *,
        skill1_id,
        description_of_service1: Optional[str],
        skill2_id,
        description_of_service2: Optional[str],
        start_date: Optional[datetime],
        expected_end_date: Optional[datetime] = None,
        message: Optional[str],
    ) -> SessionCounterOffer:
        session = self.get_session_or_404(session_id)
        self._require_party(session, actor)
        skill1_id = require_id(skill1_id, "skill1_id")
        skill2_id = require_id(skill2_id, "skill2_id")
        desc1 = require_text(description_of_service1, "description_of_service1")
        desc2 = require_text(description_of_service2, "description_of_service2")
        message = require_text(message, "message", max_length=COUNTER_OFFER_MESSAGE_MAX_LENGTH)
        check_schedule(start_date, expected_end_date)
        self._require_skills(skill1_id, skill2_id)

        # Flags the proposal as amended and doubles as the pending guard
        won = self.sessions.compare_and_set(
            session.id,
            {"status": (SessionStatus.PENDING,)},
            is_amended=True,
            updated_at=utcnow(),
        )
        if not won:
            current = self.sessions.get(session.id)
            raise PreconditionFailed(
                "Counter-offers can only be made on pending sessions",
                state=current.status if current else None,
            )

        offer = self.counter_offers.add(SessionCounterOffer(
            session_id=session.id,
            counter_offered_by=actor.user_id,
            skill1_id=skill1_id,
            description_of_service1=desc1,
            skill2_id=skill2_id,
            description_of_service2=desc2,
            start_date=start_date,
            expected_end_date=expected_end_date,
            message=message,
            status=CounterOfferStatus.PENDING.value,
        ))
        logger.info(
            "Counter-offer %s on session %s by %s", offer.id, session.id, actor.user_id
        )

        self.notify(
            "counter_offer_proposed",
            recipient_id=session.counterparty_of(actor.user_id),
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.display_name(actor.user_id)} sent a counter-offer for your session.",
        )
        return offer

    def respond_counter_offer(self, counter_offer_id, actor: Actor, decision: str) -> SessionCounterOffer:
        """
        Accept or reject a counter-offer; only the party who did not make it may answer.

        Accepting rewrites the session terms and activates it with progress
        rows due at the offered end date. Rejecting cancels the proposal.
        The session moves first, so an offer is never marked answered while
        its session stayed pending.
        """
        counter_offer_id = require_id(counter_offer_id, "counter_offer_id")
        decision = require_choice(decision, COUNTER_OFFER_DECISIONS, "decision")
        offer = self.counter_offers.get(counter_offer_id)
        if offer is None:
            raise NotFound("Counter-offer not found")
        session = self.get_session_or_404(offer.session_id)
        self._require_party(session, actor)
        if actor.user_id != session.counterparty_of(offer.counter_offered_by):
            raise Forbidden("Only the other party can respond to this counter-offer")
        if offer.status != CounterOfferStatus.PENDING:
            raise PreconditionFailed("Counter-offer has already been answered", state=offer.status)

        if decision == "accept":
            session = self.transition(
                session,
                (SessionStatus.PENDING,),
                SessionStatus.ACTIVE,
                is_accepted=True,
                skill1_id=offer.skill1_id,
                description_of_service1=offer.description_of_service1,
                skill2_id=offer.skill2_id,
                description_of_service2=offer.description_of_service2,
                start_date=offer.start_date,
                expected_end_date=offer.expected_end_date,
            )
            due_date = offer.expected_end_date or (
                offer.start_date + timedelta(days=self.progress_due_days)
            )
            self._open_progress(session, due_date)
            outcome = CounterOfferStatus.ACCEPTED
        else:
            session = self.transition(
                session,
                (SessionStatus.PENDING,),
                SessionStatus.CANCELED,
                is_accepted=False,
            )
            outcome = CounterOfferStatus.REJECTED

        won = self.counter_offers.compare_and_set(
            offer.id,
            {"status": (CounterOfferStatus.PENDING,)},
            status=outcome.value,
            responded_by=actor.user_id,
            responded_at=utcnow(),
        )
        if not won:
            current = self.counter_offers.get(offer.id)
            raise PreconditionFailed(
                "Counter-offer has already been answered",
                state=current.status if current else None,
            )
        offer = self.counter_offers.get(offer.id)
        logger.info("Counter-offer %s -> %s", offer.id, outcome.value)

        self.notify(
            f"counter_offer_{outcome.value}",
            recipient_id=offer.counter_offered_by,
            actor_id=actor.user_id,
            session_id=session.id,
            message=f"{self.display_name(actor.user_id)} {outcome.value} your counter-offer.",
        )
        return offer

    def list_counter_offers(self, session_id, actor: Actor) -> List[SessionCounterOffer]:
        session = self.get_session(session_id, actor)
        return self.counter_offers.list_for_session(session.id)

    # ======================
    # READS
    # ======================
    def get_session(self, session_id, actor: Actor) -> Session:
        session = self.get_session_or_404(session_id)
        if not actor.is_admin:
            self._require_party(session, actor)
        return session

    def list_sessions(self, actor: Actor, status: Optional[str] = None) -> List[Session]:
        if status is not None and status not in [s.value for s in SessionStatus]:
            raise ValidationError("Unknown session status", field="status")
        return self.sessions.list_for_user(actor.user_id, status=status)

    # ======================
    # ADMIN REPAIR
    # ======================
    def fix_status_consistency(self, actor: Actor) -> int:
        """
        Recompute ``status`` from ``is_accepted`` for every session.

        Safe to re-run after a partial failure: each row is repaired with a
        conditional write against the status it was read with, and a
        consistent row is never touched.
        """
        require_admin(actor)
        repaired = 0
        for session in self.sessions.list_all():
            target = expected_status_for(session.is_accepted, session.status)
            if session.status == target:
                continue
            won = self.sessions.compare_and_set(
                session.id,
                {"status": (session.status,)},
                status=target,
                updated_at=utcnow(),
            )
            if won:
                repaired += 1
                logger.warning(
                    "Repaired session %s status %r -> %r (is_accepted=%r)",
                    session.id, session.status, target, session.is_accepted,
                )
        logger.info("Status consistency pass repaired %s sessions", repaired)
        return repaired
