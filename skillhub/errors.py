"""
Domain error taxonomy for the session, meeting and report workflows.

Every error carries a human readable ``detail`` plus, where it helps the
caller decide between retrying and re-fetching, the offending ``field``
or the ``state`` the record was found in. All of them are ``ValueError``
subclasses so service callers that already catch ``ValueError`` keep
working.
"""

from typing import Any, Dict, Optional


class SkillSwapError(ValueError):
    kind = "error"
    status_code = 400

    def __init__(
        self,
        detail: str,
        *,
        field: Optional[str] = None,
        state: Optional[str] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.field = field
        self.state = state

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.detail, "error": self.kind}
        if self.field is not None:
            payload["field"] = self.field
        if self.state is not None:
            payload["state"] = self.state
        return payload


class ValidationError(SkillSwapError):
    """Missing or malformed input. Never retried."""
    kind = "validation_error"
    status_code = 400


class PreconditionFailed(SkillSwapError):
    """The record is no longer in the state the command assumes."""
    kind = "precondition_failed"
    status_code = 409


class Forbidden(SkillSwapError):
    kind = "forbidden"
    status_code = 403


class NotFound(SkillSwapError):
    kind = "not_found"
    status_code = 404


class CapacityExceeded(SkillSwapError):
    kind = "capacity_exceeded"
    status_code = 429
