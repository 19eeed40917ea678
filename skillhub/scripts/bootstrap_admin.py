import os
import re
import sys
from typing import Optional

from skillhub import models
from skillhub.database import Base, SessionLocal, engine
from skillhub.models.user import UserRole
from skillhub.utils.security import get_password_hash


CONFIRM_PHRASE = "CREATE-FIRST-ADMIN"
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _is_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _required_env(key: str) -> str:
    value = os.getenv(key, "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {key}")
    return value


def _validate_password(password: str) -> None:
    if len(password) < 8:
        raise ValueError("ADMIN_PASSWORD must be at least 8 characters.")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("ADMIN_PASSWORD must be <= 72 bytes (bcrypt limit).")
    if not re.search(r"[A-Z]", password) or not re.search(r"[a-z]", password):
        raise ValueError("ADMIN_PASSWORD must mix upper and lower case letters.")
    if not re.search(r"\d", password):
        raise ValueError("ADMIN_PASSWORD must contain at least one digit.")


def create_first_admin(db, *, first_name: str, last_name: str, email: str, password: str):
    """Insert the first admin account. Refuses once any admin exists."""
    email = email.strip().lower()
    if not EMAIL_RE.match(email):
        raise ValueError("ADMIN_EMAIL is not a valid email format.")
    _validate_password(password)

    if db.query(models.User).filter(models.User.role == UserRole.ADMIN).count() > 0:
        raise ValueError(
            "Admin bootstrap blocked: an admin already exists. "
            "This command is one-time for first admin creation."
        )
    if db.query(models.User).filter(models.User.email == email).first():
        raise ValueError("ADMIN_EMAIL is already registered.")

    user = models.User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password_hash=get_password_hash(password),
        role=UserRole.ADMIN,
    )
    db.add(user)
    db.flush()
    return user


def bootstrap_admin() -> int:
    try:
        if not _is_truthy(os.getenv("ENABLE_ADMIN_BOOTSTRAP")):
            raise ValueError(
                "Bootstrap disabled. Set ENABLE_ADMIN_BOOTSTRAP=true to run."
            )
        confirm = _required_env("ADMIN_BOOTSTRAP_CONFIRM")
        if confirm != CONFIRM_PHRASE:
            raise ValueError(
                f"Invalid ADMIN_BOOTSTRAP_CONFIRM. Expected exact phrase: {CONFIRM_PHRASE}"
            )

        Base.metadata.create_all(bind=engine)
        db = SessionLocal()
        try:
            user = create_first_admin(
                db,
                first_name=_required_env("ADMIN_FIRST_NAME"),
                last_name=os.getenv("ADMIN_LAST_NAME", "").strip(),
                email=_required_env("ADMIN_EMAIL"),
                password=_required_env("ADMIN_PASSWORD"),
            )
            db.commit()
            print(f"Admin created successfully: {user.email}")
            return 0
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
    except Exception as exc:
        print(f"Admin bootstrap failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(bootstrap_admin())
