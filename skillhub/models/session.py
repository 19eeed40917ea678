# skillhub/models/session.py
import enum

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, TIMESTAMP, func
from skillhub.database import Base


class SessionStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CANCELED = "canceled"
    COMPLETED = "completed"
    DISPUTED = "disputed"


# Statuses a session may legitimately hold once it has been accepted
ACCEPTED_STATUSES = (
    SessionStatus.ACTIVE,
    SessionStatus.COMPLETED,
    SessionStatus.DISPUTED,
    SessionStatus.CANCELED,
)


class Session(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)

    # user1 proposed the exchange, user2 is the receiving party
    user1_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user2_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    skill1_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    description_of_service1 = Column(Text, nullable=False)
    skill2_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    description_of_service2 = Column(Text, nullable=False)

    start_date = Column(TIMESTAMP, nullable=False)
    expected_end_date = Column(TIMESTAMP, nullable=True)

    # Written only together with status, see services.session_service
    is_accepted = Column(Boolean, nullable=True, default=None)
    status = Column(String(20), nullable=False, default=SessionStatus.PENDING.value, index=True)
    # Set once a counter-offer has been made on the proposal
    is_amended = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    def party_ids(self):
        return (self.user1_id, self.user2_id)

    def has_party(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def counterparty_of(self, user_id: int) -> int:
        return self.user2_id if user_id == self.user1_id else self.user1_id
