"""Conversation and message persistence."""
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from couples_chat.core.errors import NotFoundError
from couples_chat.models.chat import Conversation, Message

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 50


def make_title(message: str) -> str:
    return message.strip()[:TITLE_MAX_CHARS]


def get_or_create_conversation(
    db: Session,
    user_id: str,
    conversation_id: Optional[str],
    first_message: str,
    platform_id: Optional[str] = None,
    language: str = "en",
) -> Conversation:
    """Get existing conversation or create new one titled after the first message."""
    if conversation_id:
        conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
        if conversation:
            return conversation
        logger.warning(f"Conversation {conversation_id} not found, starting a new one")

    conversation = Conversation(
        id=str(uuid.uuid4()),
        user_id=user_id,
        platform_id=platform_id,
        title=make_title(first_message),
        language=language,
    )
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation


def get_conversation_history(db: Session, conversation_id: str, limit: int = 10) -> List[Dict[str, str]]:
    """Last `limit` messages as role/content dicts, oldest first."""
    messages = (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )
    messages.reverse()
    return [{"role": m.role, "content": m.content} for m in messages]


def append_message(
    db: Session,
    conversation_id: str,
    role: str,
    content: str,
    meta: Optional[dict] = None,
) -> Message:
    message = Message(conversation_id=conversation_id, role=role, content=content, meta=meta)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def update_conversation_title(db: Session, conversation: Conversation, message: str) -> None:
    conversation.title = make_title(message)
    conversation.updated_at = datetime.utcnow()
    db.commit()


def touch_conversation(db: Session, conversation: Conversation) -> None:
    conversation.updated_at = datetime.utcnow()
    db.commit()


def list_conversations(db: Session, user_id: str) -> List[Conversation]:
    return (
        db.query(Conversation)
        .filter(Conversation.user_id == user_id)
        .order_by(Conversation.updated_at.desc())
        .all()
    )


def list_messages(db: Session, conversation_id: str) -> List[Message]:
    """All messages of a conversation, oldest first. Raises NotFoundError."""
    if db.query(Conversation.id).filter(Conversation.id == conversation_id).first() is None:
        raise NotFoundError(f"Conversation {conversation_id} not found")
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )


def delete_conversation(db: Session, conversation_id: str) -> None:
    """Delete a conversation and its messages. Raises NotFoundError."""
    conversation = db.query(Conversation).filter(Conversation.id == conversation_id).first()
    if conversation is None:
        raise NotFoundError(f"Conversation {conversation_id} not found")
    db.delete(conversation)
    db.commit()
    logger.info(f"Deleted conversation {conversation_id}")
