"""Rule-based intent classification for incoming chat messages."""
import re
from enum import Enum
from typing import Callable, List, Tuple


class Intent(str, Enum):
    """Closed set of intents driving template selection."""
    GREETING = "greeting"
    FEATURE_HELP = "feature_help"
    RELATIONSHIP_ADVICE = "relationship_advice"
    DATE_IDEAS = "date_ideas"
    CONTENT_GENERATION = "content_generation"
    SUBSCRIPTION_INFO = "subscription_info"


GREETING_PATTERN = re.compile(
    r"^(hi|hello|hey|greetings|good morning|good afternoon|good evening)",
    re.IGNORECASE,
)

FEATURE_HELP_KEYWORDS = (
    "how do i", "how to", "help with", "love note", "date idea", "goal",
    "milestone", "feature",
)

# Overlaps FEATURE_HELP_KEYWORDS ("help with" vs "help"); precedence decides.
RELATIONSHIP_ADVICE_KEYWORDS = (
    "advice", "help", "problem", "issue", "struggle", "difficult",
    "communication", "argue", "fight", "intimacy", "connection", "improve",
)

DATE_IDEAS_KEYWORDS = (
    "date", "activity", "what to do", "weekend", "tonight", "idea",
)

CONTENT_GENERATION_KEYWORDS = (
    "poem", "write", "create", "generate", "love note", "message", "apology",
    "letter",
)

SUBSCRIPTION_INFO_KEYWORDS = (
    "subscription", "plan", "tier", "premium", "what can i do", "features",
)


def _contains_any(keywords: Tuple[str, ...]) -> Callable[[str], bool]:
    def predicate(text: str) -> bool:
        lower = text.lower()
        return any(keyword in lower for keyword in keywords)
    return predicate


# Evaluated top to bottom, first match wins. Order is part of the behavior.
CLASSIFICATION_RULES: List[Tuple[Callable[[str], bool], Intent]] = [
    (lambda text: GREETING_PATTERN.match(text) is not None, Intent.GREETING),
    (_contains_any(FEATURE_HELP_KEYWORDS), Intent.FEATURE_HELP),
    (_contains_any(RELATIONSHIP_ADVICE_KEYWORDS), Intent.RELATIONSHIP_ADVICE),
    (_contains_any(DATE_IDEAS_KEYWORDS), Intent.DATE_IDEAS),
    (_contains_any(CONTENT_GENERATION_KEYWORDS), Intent.CONTENT_GENERATION),
    (_contains_any(SUBSCRIPTION_INFO_KEYWORDS), Intent.SUBSCRIPTION_INFO),
]

DEFAULT_INTENT = Intent.FEATURE_HELP


def classify_query(message: str) -> Intent:
    """Map a free-text message to exactly one intent."""
    for predicate, intent in CLASSIFICATION_RULES:
        if predicate(message):
            return intent
    return DEFAULT_INTENT
