"""Feedback and learning endpoints."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from couples_chat.core.config import Settings, get_settings
from couples_chat.core.errors import UpstreamError
from couples_chat.database import get_db
from couples_chat.schemas.chat import FeedbackRequest, FeedbackResponse, PromoteRequest, PromoteResponse
from couples_chat.services.learning import process_feedback, promote_insights, validate_feedback
from couples_chat.services.platform import get_platform_config

logger = logging.getLogger(__name__)

router = APIRouter()

THANK_YOU_MESSAGE = "Thank you for your feedback! This helps us improve."


@router.post("/feedback", response_model=FeedbackResponse)
def submit_feedback(request: FeedbackRequest, db: Session = Depends(get_db)):
    """Record a rating on an assistant reply; good ratings feed the learning loop."""
    validate_feedback(request.message_id, request.conversation_id, request.feedback_type, request.rating)
    try:
        process_feedback(
            db,
            message_id=request.message_id,
            conversation_id=request.conversation_id,
            feedback_type=request.feedback_type,
            rating=request.rating,
            comment=request.comment,
            user_id=request.user_id,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error processing feedback: {e}", exc_info=True)
        raise UpstreamError("Failed to process feedback") from e
    return FeedbackResponse(success=True, message=THANK_YOU_MESSAGE)


@router.post("/learning/promote", response_model=PromoteResponse)
def promote_learned_knowledge(
    request: PromoteRequest,
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Promote high-confidence insights into the knowledge base."""
    platform_id = None
    if request.platform_key:
        platform = get_platform_config(db, request.platform_key, config.platform_cache_ttl)
        platform_id = platform.id if platform else None

    min_confidence = request.min_confidence
    if min_confidence is None:
        min_confidence = config.learning_min_confidence

    try:
        promoted = promote_insights(db, platform_id=platform_id, min_confidence=min_confidence)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error promoting insights: {e}", exc_info=True)
        raise UpstreamError("Failed to promote insights") from e
    logger.info(f"Knowledge promotion pass: {promoted} entries created")
    return PromoteResponse(promoted=promoted)
