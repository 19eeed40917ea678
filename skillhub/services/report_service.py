# skillhub/services/report_service.py
"""
Report / moderation workflow for in-session complaints.

    pending -> under_review -> resolved

``open_report`` is the explicit "admin has seen this" command; listing or
fetching reports never changes their state. Resolution is one-shot.
"""

import logging
from typing import List, Optional, Sequence

from skillhub.errors import Forbidden, NotFound, ValidationError
from skillhub.models.report import (
    ACTIVE_REPORT_STATUSES,
    ReportInSession,
    ReportReason,
    ReportResolution,
    ReportStatus,
)
from skillhub.repositories import ReportRepository
from skillhub.services.common import (
    Actor,
    require_admin,
    require_choice,
    require_id,
    require_text,
    utcnow,
)
from skillhub.services.session_service import SessionService

logger = logging.getLogger(__name__)


ADMIN_RESPONSES = {
    ReportResolution.MARK_RESOLVED.value: "Report has been marked as resolved by admin.",
    ReportResolution.WARN_REPORTED.value: "Warning issued to reported user. Report resolved.",
    ReportResolution.WARN_REPORTER.value: (
        "Warning issued to reporting user for false complaint. Report resolved."
    ),
    ReportResolution.DISMISS.value: "Report dismissed - no action required.",
}

REPORT_ACTIONS = ("warn", "suspend", "block")
ADMIN_MESSAGE_MAX_LENGTH = 1000


class ReportService:

    def __init__(self, session_service: SessionService, reports: ReportRepository):
        self.session_service = session_service
        self.users = session_service.users
        self.reports = reports

    def _get_report(self, report_id) -> ReportInSession:
        report_id = require_id(report_id, "report_id")
        report = self.reports.get(report_id)
        if report is None:
            raise NotFound("Report not found")
        return report

    def _close(self, report: ReportInSession, actor: Actor, **changes) -> ReportInSession:
        now = utcnow()
        won = self.reports.compare_and_set(
            report.id,
            {"status": ACTIVE_REPORT_STATUSES},
            status=ReportStatus.RESOLVED.value,
            admin_id=actor.user_id,
            resolved_at=now,
            **changes,
        )
        if not won:
            logger.info("Report %s already resolved; rejecting second resolution", report.id)
            raise NotFound("Active report not found", state=ReportStatus.RESOLVED.value)
        report = self.reports.get(report.id)
        logger.info("Report %s resolved by admin %s", report.id, actor.user_id)

        self.session_service.notify(
            "report_resolved",
            recipient_id=report.reported_by,
            actor_id=actor.user_id,
            session_id=report.session_id,
            message=f"Your report has been reviewed. {report.admin_response}",
        )
        return report

    def file_report(
        self,
        actor: Actor,
        *,
        session_id,
        reported_user_id,
        reason: str,
        description: Optional[str],
        evidence_files: Optional[Sequence[str]] = None,
    ) -> ReportInSession:
        reported_user_id = require_id(reported_user_id, "reported_user_id")
        if reported_user_id == actor.user_id:
            raise ValidationError("Cannot report yourself", field="reported_user_id")
        reason = require_choice(reason, ReportReason, "reason")
        description = require_text(description, "description", max_length=2000)

        session = self.session_service.get_session_or_404(session_id)
        if not (session.has_party(actor.user_id) and session.has_party(reported_user_id)):
            raise Forbidden("Both users must be parties of the reported session")

        report = self.reports.add(ReportInSession(
            session_id=session.id,
            reported_by=actor.user_id,
            reported_user=reported_user_id,
            reason=reason,
            description=description,
            evidence_files=list(evidence_files or []),
            status=ReportStatus.PENDING.value,
        ))
        logger.info(
            "Report %s filed on session %s against user %s",
            report.id, session.id, reported_user_id,
        )
        return report

    def open_report(self, report_id, actor: Actor) -> ReportInSession:
        require_admin(actor)
        report = self._get_report(report_id)
        won = self.reports.compare_and_set(
            report.id,
            {"status": (ReportStatus.PENDING,)},
            status=ReportStatus.UNDER_REVIEW.value,
            admin_id=actor.user_id,
            reviewed_at=utcnow(),
        )
        if won:
            logger.info("Report %s under review by admin %s", report.id, actor.user_id)
        return self.reports.get(report.id)

    def get_report(self, report_id, actor: Actor) -> ReportInSession:
        require_admin(actor)
        return self._get_report(report_id)

    def list_reports(self, actor: Actor, status: Optional[str] = None) -> List[ReportInSession]:
        require_admin(actor)
        if status is not None:
            status = require_choice(status, ReportStatus, "status")
        return self.reports.list_reports(status=status)

    def resolve_report(
        self,
        report_id,
        resolution: str,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> ReportInSession:
        require_admin(actor)
        resolution = require_choice(resolution, ReportResolution, "resolution")
        report = self._get_report(report_id)
        return self._close(
            report,
            actor,
            resolution=resolution,
            admin_response=ADMIN_RESPONSES[resolution],
            admin_notes=(notes or "").strip() or None,
        )

    def take_report_action(
        self,
        report_id,
        action: str,
        actor: Actor,
        admin_message: Optional[str],
    ) -> ReportInSession:
        """Resolve with an admin-authored message and update the reported user's standing."""
        require_admin(actor)
        action = require_choice(action, REPORT_ACTIONS, "action")
        message = require_text(admin_message, "admin_message", max_length=ADMIN_MESSAGE_MAX_LENGTH)
        report = self._get_report(report_id)

        resolution = (
            ReportResolution.WARN_REPORTED.value if action == "warn"
            else ReportResolution.MARK_RESOLVED.value
        )
        report = self._close(
            report,
            actor,
            resolution=resolution,
            admin_response=message,
            admin_notes=f"action:{action}",
        )

        if action == "suspend":
            self.users.update_standing(
                report.reported_user,
                is_suspended=True,
                suspended_at=utcnow(),
                suspension_reason=message,
            )
            logger.warning("User %s suspended via report %s", report.reported_user, report.id)
        elif action == "block":
            self.users.update_standing(report.reported_user, is_blocked=True)
            logger.warning("User %s blocked via report %s", report.reported_user, report.id)
        return report
