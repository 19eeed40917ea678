from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, func
from skillhub.database import Base


# skillhub/models/skill.py
class Skill(Base):
    """Skill listing owned by a user; sessions reference it by id only."""
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    skill_title = Column(String(100), nullable=False, index=True)
    proficiency_level = Column(String(20))
    category_name = Column(String(50), default="General")
    created_at = Column(TIMESTAMP, server_default=func.now())
