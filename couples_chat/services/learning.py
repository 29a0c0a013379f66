"""Feedback-driven learning: query patterns, insights and knowledge promotion."""
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from couples_chat.core.errors import ValidationError
from couples_chat.models.chat import Conversation, Feedback, Message
from couples_chat.models.knowledge import KnowledgeEntry, KnowledgeUpdate, LearningInsight, QueryPattern
from couples_chat.services.classifier import classify_query

logger = logging.getLogger(__name__)

FEEDBACK_TYPES = ("helpful", "not_helpful", "incorrect", "suggestion")
POSITIVE_MIN_RATING = 4

PATTERN_MIN_CHARS = 10
PATTERN_MAX_CHARS = 200

MATCH_CANDIDATES = 10
MATCH_MIN_SCORE = 0.5

PROMOTION_BATCH = 10

_LEADING_FILLER_RE = re.compile(
    r"^(hi|hello|hey|please|can you|could you|i want to|i need to|help me)\b,?\s+",
    re.IGNORECASE,
)
_TRAILING_FILLER_RE = re.compile(r"(\s+(please|thanks|thank you)|\s*\.)$", re.IGNORECASE)
_LIST_LINE_RE = re.compile(r"^(•|-|\d+\.|\*\*)")


@dataclass
class ConversationAnalysis:
    user_message: str
    query_pattern: Optional[str]
    category: str
    useful_content: Optional[str] = None


def _strip_repeated(pattern: re.Pattern, text: str) -> str:
    while True:
        stripped = pattern.sub("", text, count=1).strip()
        if stripped == text:
            return text
        text = stripped


def extract_query_pattern(message: str) -> Optional[str]:
    """
    Normalize a user question into a reusable pattern.

    Returns None when the cleaned text is shorter than 10 or longer than
    200 characters.
    """
    cleaned = (message or "").strip().lower()
    cleaned = _strip_repeated(_LEADING_FILLER_RE, cleaned)
    cleaned = _strip_repeated(_TRAILING_FILLER_RE, cleaned)
    if len(cleaned) < PATTERN_MIN_CHARS or len(cleaned) > PATTERN_MAX_CHARS:
        return None
    return cleaned


def extract_useful_content(response: str) -> Optional[str]:
    """Up to five list/heading lines of a reply, else its first substantial paragraph."""
    lines = [
        line.strip()
        for line in response.split("\n")
        if len(line.strip()) > 20 and _LIST_LINE_RE.match(line.strip())
    ]
    if lines:
        return "\n".join(lines[:5])
    paragraphs = [p.strip() for p in response.split("\n\n") if len(p.strip()) > 50]
    return paragraphs[0] if paragraphs else None


def jaccard_similarity(a: str, b: str) -> float:
    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    return len(words_a & words_b) / len(union) if union else 0.0


def score_insight(rating: int, pattern_uses: int) -> float:
    """
    Confidence in [0, 1] for a candidate insight.

    60% from the rating (1 -> 0.0, 5 -> 1.0), 40% from how often the
    triggering question has been seen, saturating at five uses. A single
    5-star rating scores 0.68, below the default promotion threshold.
    """
    rating_part = (max(1, min(5, rating)) - 1) / 4
    reuse_part = min(max(pattern_uses, 0), 5) / 5
    return round(0.6 * rating_part + 0.4 * reuse_part, 3)


def _platform_filter(column, platform_id: Optional[str]):
    return column.is_(None) if platform_id is None else column == platform_id


def analyze_conversation(db: Session, conversation_id: str, message_id: int) -> Optional[ConversationAnalysis]:
    """Pattern and category of the user message answered by the rated reply."""
    messages: List[Message] = (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )
    rated_index = next((i for i, m in enumerate(messages) if m.id == message_id), None)
    if rated_index is None:
        logger.info(f"Rated message {message_id} not in conversation {conversation_id}")
        return None

    rated = messages[rated_index]
    if rated.role != "assistant":
        logger.info(f"Rated message {message_id} is not an assistant reply; nothing to learn")
        return None

    user_message = next(
        (m.content for m in reversed(messages[:rated_index]) if m.role == "user"),
        None,
    )
    if user_message is None:
        return None

    useful_content = None
    if len(rated.content) > 50:
        useful_content = extract_useful_content(rated.content)

    return ConversationAnalysis(
        user_message=user_message,
        query_pattern=extract_query_pattern(user_message),
        category=classify_query(user_message).value,
        useful_content=useful_content,
    )


def store_query_pattern(
    db: Session,
    pattern: str,
    category: str,
    platform_id: Optional[str],
    language: str = "en",
    _retry: bool = True,
) -> QueryPattern:
    """Insert a pattern with counts 1/1, or bump both counters of the existing row."""
    existing = (
        db.query(QueryPattern)
        .filter(
            QueryPattern.pattern == pattern,
            QueryPattern.language == language,
            _platform_filter(QueryPattern.platform_id, platform_id),
        )
        .first()
    )
    if existing:
        db.query(QueryPattern).filter(QueryPattern.id == existing.id).update(
            {
                QueryPattern.success_count: QueryPattern.success_count + 1,
                QueryPattern.total_uses: QueryPattern.total_uses + 1,
                QueryPattern.updated_at: datetime.utcnow(),
            },
            synchronize_session=False,
        )
        db.commit()
        db.refresh(existing)
        return existing

    row = QueryPattern(
        platform_id=platform_id,
        pattern=pattern,
        category=category,
        language=language,
        success_count=1,
        total_uses=1,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same pattern first
        db.rollback()
        if not _retry:
            raise
        return store_query_pattern(db, pattern, category, platform_id, language, _retry=False)
    db.refresh(row)
    logger.info(f"New query pattern ({category}): {pattern!r}")
    return row


def find_best_pattern(
    db: Session,
    query: str,
    platform_id: Optional[str] = None,
    language: str = "en",
) -> Optional[str]:
    """Category of the best stored pattern for a query, if it scores above 0.5."""
    patterns = (
        db.query(QueryPattern)
        .filter(
            QueryPattern.language == language,
            _platform_filter(QueryPattern.platform_id, platform_id),
        )
        .order_by(QueryPattern.success_count.desc())
        .limit(MATCH_CANDIDATES)
        .all()
    )
    query_lower = (query or "").lower().strip()
    best_category, best_score = None, 0.0
    for p in patterns:
        success_rate = p.success_count / p.total_uses if p.total_uses > 0 else 0.0
        score = 0.7 * jaccard_similarity(query_lower, p.pattern) + 0.3 * success_rate
        if best_category is None or score > best_score:
            best_category, best_score = p.category, score
    return best_category if best_score > MATCH_MIN_SCORE else None


def record_insight(
    db: Session,
    insight_type: str,
    content: str,
    context: Dict[str, Any],
    confidence: float,
    platform_id: Optional[str] = None,
) -> LearningInsight:
    """Store a candidate insight; a pending duplicate keeps the higher confidence."""
    existing = (
        db.query(LearningInsight)
        .filter(
            LearningInsight.content == content,
            LearningInsight.is_approved.is_(False),
            _platform_filter(LearningInsight.platform_id, platform_id),
        )
        .first()
    )
    if existing:
        existing.confidence_score = max(existing.confidence_score, confidence)
        existing.usage_count = (existing.usage_count or 0) + 1
        db.commit()
        return existing

    insight = LearningInsight(
        platform_id=platform_id,
        insight_type=insight_type,
        content=content,
        context=context,
        confidence_score=confidence,
        usage_count=1,
        is_approved=False,
    )
    db.add(insight)
    db.commit()
    db.refresh(insight)
    return insight


def validate_feedback(message_id, conversation_id, feedback_type, rating) -> None:
    """Raises ValidationError for missing fields, unknown type or out-of-range rating."""
    if not message_id or not conversation_id or not feedback_type or rating is None:
        raise ValidationError("messageId, conversationId, feedbackType, and rating are required")
    if feedback_type not in FEEDBACK_TYPES:
        raise ValidationError(f"feedbackType must be one of: {', '.join(FEEDBACK_TYPES)}")
    if rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5")


def process_feedback(
    db: Session,
    message_id: int,
    conversation_id: str,
    feedback_type: str,
    rating: int,
    comment: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Feedback:
    """
    Store feedback and, for helpful replies rated 4 or 5, learn from the exchange.

    Learning upserts the query pattern behind the rated reply and records
    an insight from the reply's content. Promotion into the knowledge base
    happens separately in promote_insights().
    """
    validate_feedback(message_id, conversation_id, feedback_type, rating)

    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    feedback = Feedback(
        message_id=message_id,
        conversation_id=conversation_id,
        feedback_type=feedback_type,
        rating=rating,
        comment=comment,
        user_id=user_id or (conversation.user_id if conversation else None),
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)

    if rating < POSITIVE_MIN_RATING or feedback_type != "helpful":
        return feedback
    if conversation is None:
        logger.info(f"Feedback on unknown conversation {conversation_id}; nothing to learn")
        return feedback

    analysis = analyze_conversation(db, conversation_id, message_id)
    if analysis is None:
        return feedback

    pattern_uses = 1
    if analysis.query_pattern:
        pattern = store_query_pattern(
            db,
            analysis.query_pattern,
            analysis.category,
            conversation.platform_id,
            conversation.language or "en",
        )
        pattern_uses = pattern.total_uses

    if analysis.useful_content:
        record_insight(
            db,
            insight_type="advice",
            content=analysis.useful_content,
            context={
                "query_pattern": analysis.query_pattern,
                "category": analysis.category,
                "language": conversation.language or "en",
                "conversation_id": conversation_id,
                "message_id": message_id,
                "rating": rating,
            },
            confidence=score_insight(rating, pattern_uses),
            platform_id=conversation.platform_id,
        )
    return feedback


def promote_insights(
    db: Session,
    platform_id: Optional[str] = None,
    min_confidence: float = 0.7,
) -> int:
    """
    Turn the most confident pending insights into knowledge entries.

    Takes up to 10 unapproved insights with confidence >= min_confidence,
    highest first. Each gets a knowledge entry tagged "auto_learned", an
    audit row, and is marked approved. Returns how many were promoted.
    """
    insights = (
        db.query(LearningInsight)
        .filter(
            LearningInsight.is_approved.is_(False),
            LearningInsight.confidence_score >= min_confidence,
            _platform_filter(LearningInsight.platform_id, platform_id),
        )
        .order_by(LearningInsight.confidence_score.desc())
        .limit(PROMOTION_BATCH)
        .all()
    )

    promoted = 0
    for insight in insights:
        context = insight.context or {}
        try:
            entry = KnowledgeEntry(
                platform_id=insight.platform_id,
                content_type="faq" if insight.insight_type == "question" else "advice",
                title=f"Learned: {insight.content[:50]}",
                content=insight.content,
                language=context.get("language"),
                meta={
                    "source": "auto_learned",
                    "confidence": insight.confidence_score,
                    "usage_count": insight.usage_count,
                    "insight_id": insight.id,
                },
            )
            db.add(entry)
            db.flush()
            db.add(
                KnowledgeUpdate(
                    knowledge_id=entry.id,
                    update_type="auto_created",
                    new_content=insight.content,
                    source_insight_id=insight.id,
                    confidence_score=insight.confidence_score,
                )
            )
            insight.is_approved = True
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to promote insight {insight.id}: {e}")
            continue
        logger.info(
            f"Promoted insight {insight.id} to knowledge entry {entry.id} "
            f"(confidence={insight.confidence_score})"
        )
        promoted += 1

    return promoted
