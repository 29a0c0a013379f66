"""Database models for the knowledge base and the learning loop."""
from sqlalchemy import Boolean, Column, String, Integer, Float, DateTime, ForeignKey, Text, JSON, UniqueConstraint
from datetime import datetime

from couples_chat.models.base import Base


class KnowledgeEntry(Base):
    """Retrievable text snippet; platform_id NULL means global."""
    __tablename__ = "chatbot_knowledge"

    id = Column(Integer, primary_key=True, index=True)
    platform_id = Column(String, ForeignKey("chatbot_platforms.id"), nullable=True, index=True)
    content_type = Column(String(32), nullable=False, default="faq")
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    language = Column(String(8), nullable=True, index=True)  # NULL matches every language
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class QueryPattern(Base):
    """Normalized user question with running success/usage counters."""
    __tablename__ = "chatbot_query_patterns"

    id = Column(Integer, primary_key=True, index=True)
    platform_id = Column(String, ForeignKey("chatbot_platforms.id"), nullable=True, index=True)
    pattern = Column(String(200), nullable=False)
    category = Column(String(32), nullable=False)
    language = Column(String(8), nullable=False, default="en")
    success_count = Column(Integer, nullable=False, default=0)
    total_uses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("platform_id", "pattern", "language", name="uq_query_pattern"),
    )


class LearningInsight(Base):
    """Candidate knowledge extracted from a well-rated conversation."""
    __tablename__ = "chatbot_learning_insights"

    id = Column(Integer, primary_key=True, index=True)
    platform_id = Column(String, ForeignKey("chatbot_platforms.id"), nullable=True, index=True)
    insight_type = Column(String(32), nullable=False)  # question | advice
    content = Column(Text, nullable=False)
    context = Column(JSON, nullable=True)
    confidence_score = Column(Float, nullable=False, default=0.0)
    usage_count = Column(Integer, nullable=False, default=1)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class KnowledgeUpdate(Base):
    """Audit trail of knowledge entries created by the learning loop."""
    __tablename__ = "chatbot_knowledge_updates"

    id = Column(Integer, primary_key=True, index=True)
    knowledge_id = Column(Integer, ForeignKey("chatbot_knowledge.id"), nullable=False, index=True)
    update_type = Column(String(32), nullable=False)
    new_content = Column(Text, nullable=True)
    source_insight_id = Column(Integer, ForeignKey("chatbot_learning_insights.id"), nullable=True)
    confidence_score = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
