"""Intent classification and feature extraction."""
import pytest

from couples_chat.services.classifier import Intent, classify_query
from couples_chat.services.features import extract_features
from couples_chat.services.templates import RESPONSE_TEMPLATES


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Hello there", Intent.GREETING),
        ("good evening!", Intent.GREETING),
        ("How do I add a milestone?", Intent.FEATURE_HELP),
        ("I need advice about my marriage", Intent.RELATIONSHIP_ADVICE),
        ("Any plans for tonight?", Intent.DATE_IDEAS),
        ("Please write an apology", Intent.CONTENT_GENERATION),
        ("Tell me about the premium tier", Intent.SUBSCRIPTION_INFO),
        ("Thanks", Intent.FEATURE_HELP),
    ],
)
def test_classify_query(message, expected):
    assert classify_query(message) == expected


def test_greeting_wins_over_later_rules():
    """A greeting prefix takes precedence even when other keywords follow."""
    assert classify_query("Hey, how do I write a love note?") == Intent.GREETING


def test_help_overlap_follows_rule_order():
    # "help with" belongs to feature help, bare "help" to relationship advice
    assert classify_query("I need help with a love note") == Intent.FEATURE_HELP
    assert classify_query("I need help") == Intent.RELATIONSHIP_ADVICE


def test_date_ideas_phrase_is_feature_help():
    assert classify_query("Show me date ideas") == Intent.FEATURE_HELP
    assert classify_query("What should we do this weekend?") == Intent.DATE_IDEAS


def test_every_intent_has_a_template():
    assert set(RESPONSE_TEMPLATES) == set(Intent)


def test_extract_features_dedupes_in_mapping_order():
    assert extract_features("Send a love note and try a date idea") == ["Love Notes", "Date Ideas"]


def test_extract_features_order_is_mapping_order_not_text_order():
    assert extract_features("Join the community and take a quiz") == ["Relationship Quizzes", "Community"]


def test_extract_features_empty():
    assert extract_features("") == []
    assert extract_features("Nothing relevant here.") == []


def test_long_feature_keys_map_to_same_names():
    assert extract_features("Take the love language quiz") == ["Love Language Quiz", "Relationship Quizzes"]
    assert extract_features("Our points system") == ["Points System"]
