"""Template responder."""
import pytest

from couples_chat.services.context import QueryContext, UserContext
from couples_chat.services.templates import (
    ADVICE_CONFLICT,
    ADVICE_CONNECTION,
    ADVICE_GENERAL,
    ADVICE_GOALS,
    APOLOGY,
    CONTENT_MENU,
    DATE_IDEAS,
    LOVE_NOTE,
    POEM,
    UPGRADE_NOTE,
    generate_template_response,
    personalize_response,
    render_content_generation,
    render_date_ideas,
    render_relationship_advice,
    resolve_tier,
)


def _ctx(message, **kwargs):
    user_context = kwargs.pop("user_context", UserContext())
    return QueryContext(message=message, user_context=user_context, **kwargs)


def test_english_greeting_suggests_no_features():
    response = generate_template_response(_ctx("Hello"))
    assert response.model == "template"
    assert response.content.startswith("Hello! 💕 I'm One2One Love AI")
    assert "your partner" in response.content
    assert response.features_suggested == []


def test_greeting_in_user_language_with_partner_name():
    ctx = _ctx("Hi", language="es", user_context=UserContext(partner_name="Sam"))
    response = generate_template_response(ctx)
    assert response.content.startswith("¡Hola!")
    assert "Sam" in response.content


def test_greeting_unknown_language_falls_back_to_english():
    response = generate_template_response(_ctx("Hello", language="xx"))
    assert response.content.startswith("Hello!")


def test_poem_is_personalized():
    ctx = _ctx("Can you write me a poem for my partner?", user_context=UserContext(partner_name="Sam"))
    response = generate_template_response(ctx)
    assert "**A Love Note for Sam**" in response.content
    assert "your partner" not in response.content
    assert "AI Content Creator" in response.features_suggested


def test_feature_help_uses_knowledge_verbatim():
    ctx = _ctx("How do I send a love note?", knowledge_context="**Love Notes** (faq):\nOpen the Love Notes tab.")
    response = generate_template_response(ctx)
    assert response.content.startswith("**Love Notes** (faq):\nOpen the Love Notes tab.")
    assert response.content.endswith("Would you like me to guide you through using Love Notes?")


def test_feature_help_without_knowledge_mentions_tier():
    ctx = _ctx("How do I add a milestone?", user_context=UserContext(subscription_tier="Premiere"))
    response = generate_template_response(ctx)
    assert "Milestones" in response.content
    assert "(Premiere)" in response.content


def test_conflict_advice_gets_upgrade_note_on_basis():
    response = generate_template_response(_ctx("We argue all the time"))
    assert response.content == ADVICE_CONFLICT + UPGRADE_NOTE
    assert "AI Relationship Coach" in response.features_suggested


def test_no_upgrade_note_on_paid_tier():
    ctx = _ctx("We argue all the time", user_context=UserContext(subscription_tier="Premiere"))
    assert generate_template_response(ctx).content == ADVICE_CONFLICT


def test_budget_date_ideas():
    response = generate_template_response(_ctx("Something cheap to do this weekend"))
    assert response.content == DATE_IDEAS["free"]


def test_unknown_tier_is_basis():
    assert resolve_tier("Gold") == "Basis"
    assert resolve_tier(None) == "Basis"
    assert resolve_tier("premiere") == "Premiere"

    ctx = _ctx("What subscription plan am I on?", user_context=UserContext(subscription_tier="Gold"))
    response = generate_template_response(ctx)
    assert "**Basis (FREE)**" in response.content
    assert response.content.endswith(UPGRADE_NOTE)


def test_personalize_response_is_idempotent():
    user_context = UserContext(partner_name="Sam")
    text = "Ask your partner about the AI Relationship Coach."
    once = personalize_response(text, user_context)
    assert once == "Ask Sam about the AI Relationship Coach." + UPGRADE_NOTE
    assert personalize_response(once, user_context) == once


def test_partner_name_with_backslash_is_inserted_literally():
    user_context = UserContext(partner_name="D\\Angelo")

    response = generate_template_response(_ctx("Hello", user_context=user_context))

    assert "D\\Angelo" in response.content
    assert personalize_response("Ask your partner.", UserContext(partner_name="Jo\\2")) == "Ask Jo\\2."


@pytest.mark.parametrize(
    "message,expected",
    [
        ("We lack intimacy lately", ADVICE_CONNECTION),
        ("How can we improve as a couple", ADVICE_GOALS),
        ("Things feel hard right now", ADVICE_GENERAL),
        ("Every fight hurts our connection", ADVICE_CONFLICT),
        ("Our connection needs a goal", ADVICE_CONNECTION),
    ],
)
def test_relationship_advice_dispatch(message, expected):
    assert render_relationship_advice(_ctx(message)) == expected


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Something expensive for our anniversary", DATE_IDEAS["luxury"]),
        ("Any fun plans?", DATE_IDEAS["any"]),
        ("Cheap but with a luxury feel", DATE_IDEAS["free"]),
    ],
)
def test_date_ideas_dispatch(message, expected):
    assert render_date_ideas(_ctx(message)) == expected


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Write a sweet message", LOVE_NOTE),
        ("I need an apology", APOLOGY),
        ("Say sorry for me", APOLOGY),
        ("An apology message please", LOVE_NOTE),
        ("A poem and a note", POEM),
        ("Create something for us", CONTENT_MENU),
    ],
)
def test_content_generation_dispatch(message, expected):
    ctx = _ctx(message, user_context=UserContext(partner_name="Sam"))
    assert render_content_generation(ctx) == expected.format(partner="Sam")
