"""Read-only views of the platform's user tables."""
from sqlalchemy import Column, String, Integer, DateTime
from datetime import datetime

from couples_chat.models.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True)
    subscription_tier = Column(String(32), nullable=True)
    partner_name = Column(String, nullable=True)
    language = Column(String(8), nullable=True)


class RelationshipGoal(Base):
    __tablename__ = "relationship_goals"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    progress = Column(Integer, nullable=True)  # 0-100
    status = Column(String(16), nullable=False, default="active")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    date = Column(DateTime, nullable=False, index=True)
