"""Request and response schemas for chatbot endpoints (camelCase on the wire)."""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(CamelModel):
    """Request schema for chat endpoint. Required fields are checked in the route (400, not 422)."""
    message: Optional[str] = Field(None, max_length=4000, description="User message")
    conversation_id: Optional[str] = Field(None, description="Existing conversation to append to")
    user_id: Optional[str] = Field(None, description="User identifier")
    language: Optional[str] = Field("en", description="Reply language (en, es, fr, it, de, nl, pt)")
    platform_key: Optional[str] = Field(None, description="Tenant key; defaults to the configured platform")


class ChatResponse(CamelModel):
    """Response schema for chat endpoint."""
    message: str = Field(..., description="Assistant reply")
    conversation_id: str = Field(..., description="Conversation ID for this session")
    features_suggested: List[str] = Field(default_factory=list, description="Platform features mentioned in the reply")
    message_id: Optional[int] = Field(None, description="ID of the stored assistant reply (for feedback)")


class FeedbackRequest(CamelModel):
    """Request schema for feedback endpoint."""
    message_id: Optional[int] = None
    conversation_id: Optional[str] = None
    feedback_type: Optional[str] = Field(None, description="helpful | not_helpful | incorrect | suggestion")
    rating: Optional[int] = Field(None, description="1-5")
    comment: Optional[str] = Field(None, max_length=2000)
    user_id: Optional[str] = Field(None, description="Rating author; defaults to the conversation owner")


class FeedbackResponse(CamelModel):
    success: bool
    message: str


class PromoteRequest(CamelModel):
    """Request schema for the knowledge promotion pass."""
    platform_key: Optional[str] = Field(None, description="Tenant to promote for; omit for global insights")
    min_confidence: Optional[float] = Field(None, ge=0.0, le=1.0)


class PromoteResponse(CamelModel):
    promoted: int


class ConversationOut(CamelModel):
    id: str
    title: Optional[str] = None
    platform_id: Optional[str] = None
    language: str = "en"
    created_at: datetime
    updated_at: datetime


class MessageOut(CamelModel):
    id: int
    role: str
    content: str
    metadata: Optional[dict] = None
    created_at: datetime
