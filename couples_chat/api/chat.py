"""Chat endpoints. Lookups and LLM calls run in the thread pool."""
import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from couples_chat.core.config import Settings, get_settings
from couples_chat.core.errors import UpstreamError, ValidationError
from couples_chat.database import get_db, run_in_session
from couples_chat.schemas.chat import ChatRequest, ChatResponse, ConversationOut, MessageOut
from couples_chat.services.context import QueryContext, build_user_context
from couples_chat.services.conversations import (
    append_message,
    delete_conversation,
    get_conversation_history,
    get_or_create_conversation,
    list_conversations,
    list_messages,
    touch_conversation,
    update_conversation_title,
)
from couples_chat.services.knowledge import search_knowledge_base
from couples_chat.services.platform import get_platform_config
from couples_chat.services.responder import generate_response
from couples_chat.utils.language import normalize_language

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """
    Reply to a widget message, creating the conversation on first contact.
    """
    if not request.message or not request.message.strip() or not request.user_id:
        raise ValidationError("Message and userId are required")

    message = request.message.strip()
    language = normalize_language(request.language)
    platform_key = request.platform_key or config.default_platform_key

    try:
        platform = get_platform_config(db, platform_key, config.platform_cache_ttl)
        platform_id = platform.id if platform else None

        conversation = get_or_create_conversation(
            db, request.user_id, request.conversation_id, message, platform_id=platform_id, language=language
        )
        history = get_conversation_history(db, conversation.id, config.history_max_messages)
        append_message(db, conversation.id, "user", message)

        # Independent lookups, each with its own session; both are best-effort
        user_lookup, knowledge_lookup = await asyncio.gather(
            asyncio.to_thread(run_in_session, build_user_context, request.user_id),
            asyncio.to_thread(
                run_in_session,
                search_knowledge_base,
                message,
                language,
                platform_id,
                config.knowledge_search_limit,
            ),
        )
        if not user_lookup.ok:
            logger.warning(f"Continuing with partial user context: {user_lookup.error}")
        if not knowledge_lookup.ok:
            logger.warning(f"Continuing without knowledge context: {knowledge_lookup.error}")

        ctx = QueryContext(
            message=message,
            knowledge_context=knowledge_lookup.value,
            user_context=user_lookup.value,
            conversation_history=history,
            language=language,
        )
        if platform:
            ctx.assistant_name = platform.assistant_name

        ai_response = await asyncio.to_thread(generate_response, ctx, config, platform)

        reply = append_message(
            db,
            conversation.id,
            "assistant",
            ai_response.content,
            meta={
                "model": ai_response.model,
                "tokens": ai_response.tokens,
                "features_suggested": ai_response.features_suggested,
            },
        )

        if not history:
            update_conversation_title(db, conversation, message)
        else:
            touch_conversation(db, conversation)

        return ChatResponse(
            message=ai_response.content,
            conversation_id=conversation.id,
            features_suggested=ai_response.features_suggested,
            message_id=reply.id,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error in chat: {e}", exc_info=True)
        raise UpstreamError("Database error") from e


@router.get("/conversations", response_model=List[ConversationOut])
def get_conversations(user_id: str = Query(..., alias="userId"), db: Session = Depends(get_db)):
    """Conversations of a user, most recently updated first."""
    return [
        ConversationOut(
            id=c.id,
            title=c.title,
            platform_id=c.platform_id,
            language=c.language,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
        for c in list_conversations(db, user_id)
    ]


@router.get("/conversations/{conversation_id}/messages", response_model=List[MessageOut])
def get_conversation_messages(conversation_id: str, db: Session = Depends(get_db)):
    return [
        MessageOut(id=m.id, role=m.role, content=m.content, metadata=m.meta, created_at=m.created_at)
        for m in list_messages(db, conversation_id)
    ]


@router.delete("/conversations/{conversation_id}")
def remove_conversation(conversation_id: str, db: Session = Depends(get_db)):
    delete_conversation(db, conversation_id)
    return {"success": True}
