import enum

from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, func
from skillhub.database import Base


class CounterOfferStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SessionCounterOffer(Base):
    """Amended terms for a pending session, answered by the other party."""
    __tablename__ = "session_counter_offers"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    counter_offered_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    skill1_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    description_of_service1 = Column(Text, nullable=False)
    skill2_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    description_of_service2 = Column(Text, nullable=False)
    start_date = Column(TIMESTAMP, nullable=False)
    expected_end_date = Column(TIMESTAMP, nullable=True)
    message = Column(Text, nullable=False)

    status = Column(String(20), nullable=False, default=CounterOfferStatus.PENDING.value, index=True)
    responded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    responded_at = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
