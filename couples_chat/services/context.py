"""User context builder: per-user state used to personalize replies."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from couples_chat.core.errors import Lookup
from couples_chat.models.profile import Milestone, Profile, RelationshipGoal

logger = logging.getLogger(__name__)

DEFAULT_TIER = "Basis"
MAX_GOALS = 5
MAX_MILESTONES = 5


@dataclass
class Goal:
    id: str
    title: str
    progress: int = 0


@dataclass
class UpcomingMilestone:
    id: str
    title: str
    date: datetime


@dataclass
class UserContext:
    """Flat, per-request snapshot of a user's relationship state. Never cached."""
    subscription_tier: str = DEFAULT_TIER
    partner_name: Optional[str] = None
    relationship_goals: List[Goal] = field(default_factory=list)
    upcoming_milestones: List[UpcomingMilestone] = field(default_factory=list)
    language: str = "en"


@dataclass
class QueryContext:
    """Everything a responder needs to answer one message."""
    message: str
    knowledge_context: str = ""
    user_context: UserContext = field(default_factory=UserContext)
    conversation_history: List[Dict[str, str]] = field(default_factory=list)
    language: str = "en"
    assistant_name: str = "One2One Love AI"


@dataclass
class AIResponse:
    content: str
    model: str
    tokens: Optional[int] = None
    features_suggested: List[str] = field(default_factory=list)


def build_user_context(db: Session, user_id: str) -> Lookup[UserContext]:
    """
    Gather profile, active goals and upcoming milestones for a user.

    Best-effort: whatever was collected before a failure is returned, with
    the failure recorded on the Lookup instead of raised.
    """
    context = UserContext()
    try:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if profile:
            context.subscription_tier = profile.subscription_tier or DEFAULT_TIER
            context.partner_name = profile.partner_name or None
            context.language = profile.language or "en"

        goals = (
            db.query(RelationshipGoal)
            .filter(RelationshipGoal.user_id == user_id, RelationshipGoal.status == "active")
            .order_by(RelationshipGoal.created_at.desc())
            .limit(MAX_GOALS)
            .all()
        )
        context.relationship_goals = [
            Goal(id=g.id, title=g.title, progress=max(0, min(100, g.progress or 0)))
            for g in goals
        ]

        milestones = (
            db.query(Milestone)
            .filter(Milestone.user_id == user_id, Milestone.date >= datetime.utcnow())
            .order_by(Milestone.date.asc())
            .limit(MAX_MILESTONES)
            .all()
        )
        context.upcoming_milestones = [
            UpcomingMilestone(id=m.id, title=m.title, date=m.date) for m in milestones
        ]
    except Exception as e:
        logger.warning(f"Error building user context for {user_id}: {e}")
        return Lookup(context, error=str(e))

    return Lookup(context)
