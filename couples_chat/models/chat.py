"""Database models for platforms, conversations, messages and feedback."""
from sqlalchemy import Boolean, Column, String, Integer, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from couples_chat.models.base import Base


class Platform(Base):
    """A branded deployment (tenant) of the chatbot."""
    __tablename__ = "chatbot_platforms"

    id = Column(String, primary_key=True, index=True)
    platform_key = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    domain = Column(String, nullable=True)
    branding = Column(JSON, nullable=True)
    features = Column(JSON, nullable=True)
    subscription_tiers = Column(JSON, nullable=True)
    system_prompt = Column(Text, nullable=True)
    mission_statement = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Conversation(Base):
    """Conversation sessions."""
    __tablename__ = "chatbot_conversations"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    platform_id = Column(String, ForeignKey("chatbot_platforms.id"), nullable=True, index=True)
    title = Column(String(50), nullable=True)
    language = Column(String(8), default="en", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="Message.id",
    )


class Message(Base):
    """Individual messages in conversations. Never updated once written."""
    __tablename__ = "chatbot_messages"

    id = Column(Integer, primary_key=True, index=True)
    conversation_id = Column(String, ForeignKey("chatbot_conversations.id"), nullable=False, index=True)
    role = Column(String(16), nullable=False)  # user | assistant | system
    content = Column(Text, nullable=False)
    # model, tokens, features_suggested
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    conversation = relationship("Conversation", back_populates="messages")


class Feedback(Base):
    """User ratings on assistant replies. Append-only."""
    __tablename__ = "chatbot_feedback"

    id = Column(Integer, primary_key=True, index=True)
    message_id = Column(Integer, nullable=False, index=True)
    conversation_id = Column(String, nullable=False, index=True)
    feedback_type = Column(String(32), nullable=False)  # helpful | not_helpful | incorrect | suggestion
    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, nullable=True)
    user_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
