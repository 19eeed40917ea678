from sqlalchemy import Column, Integer, String, Boolean, Text, TIMESTAMP, func
from skillhub.database import Base


class UserRole:
    USER = "user"
    ADMIN = "admin"


# ---------------- USER DIRECTORY ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(255))
    role = Column(String(20), nullable=False, default=UserRole.USER)

    # Standing, mutated by report moderation
    is_blocked = Column(Boolean, default=False, nullable=False)
    is_suspended = Column(Boolean, default=False, nullable=False)
    suspended_at = Column(TIMESTAMP, nullable=True)
    suspension_reason = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == UserRole.ADMIN
