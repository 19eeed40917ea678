"""Helpers shared by the lifecycle services."""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any, Iterable, Optional

from skillhub.errors import Forbidden, ValidationError


@dataclass(frozen=True)
class Actor:
    """Who issues a command. Built by the auth layer, never by the core."""
    user_id: int
    is_admin: bool = False


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Aware copy of ``value``; naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def require_id(value: Any, field: str) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", field=field)
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a valid identifier", field=field)
    if parsed <= 0:
        raise ValidationError(f"{field} must be a valid identifier", field=field)
    return parsed


def require_text(value: Optional[str], field: str, max_length: Optional[int] = None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required", field=field)
    if max_length is not None and len(cleaned) > max_length:
        raise ValidationError(
            f"{field} must be {max_length} characters or less", field=field
        )
    return cleaned


def require_choice(value: Any, choices: Iterable[str], field: str) -> str:
    allowed = [str(getattr(c, "value", c)) for c in choices]
    raw = str(getattr(value, "value", value) or "").strip().lower()
    if raw not in allowed:
        raise ValidationError(
            f"{field} must be one of: {', '.join(allowed)}", field=field
        )
    return raw


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise Forbidden("Admin access required")
