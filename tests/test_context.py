"""User context builder."""
from datetime import datetime, timedelta
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from couples_chat.models.profile import Milestone, Profile, RelationshipGoal
from couples_chat.services.context import build_user_context


def test_unknown_user_gets_defaults(db):
    result = build_user_context(db, "nobody")

    assert result.ok
    assert result.value.subscription_tier == "Basis"
    assert result.value.partner_name is None
    assert result.value.relationship_goals == []
    assert result.value.upcoming_milestones == []


def test_collects_profile_goals_and_upcoming_milestones(db):
    now = datetime.utcnow()
    db.add(Profile(id="u1", subscription_tier="Premiere", partner_name="Sam", language="fr"))
    for i in range(6):
        db.add(RelationshipGoal(
            id=f"g{i}", user_id="u1", title=f"Goal {i}", progress=i * 10, created_at=now - timedelta(days=i)
        ))
    db.add(RelationshipGoal(id="done", user_id="u1", title="Finished", status="completed", created_at=now))
    db.add_all([
        Milestone(id="m-past", user_id="u1", title="First date", date=now - timedelta(days=30)),
        Milestone(id="m-late", user_id="u1", title="Wedding", date=now + timedelta(days=90)),
        Milestone(id="m-soon", user_id="u1", title="Anniversary", date=now + timedelta(days=3)),
    ])
    db.commit()

    result = build_user_context(db, "u1")
    context = result.value

    assert result.ok
    assert context.subscription_tier == "Premiere"
    assert context.partner_name == "Sam"
    assert context.language == "fr"
    assert [g.title for g in context.relationship_goals] == ["Goal 0", "Goal 1", "Goal 2", "Goal 3", "Goal 4"]
    assert [m.title for m in context.upcoming_milestones] == ["Anniversary", "Wedding"]


def test_failure_keeps_partial_context():
    profile_query = MagicMock()
    profile_query.filter.return_value.first.return_value = Profile(
        id="u1", subscription_tier="Exclusive", partner_name="Sam"
    )
    db = MagicMock()
    db.query.side_effect = [profile_query, OperationalError("SELECT", {}, Exception("connection reset"))]

    result = build_user_context(db, "u1")

    assert not result.ok
    assert result.value.partner_name == "Sam"
    assert result.value.subscription_tier == "Exclusive"
    assert result.value.relationship_goals == []
