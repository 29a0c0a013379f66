"""Pick the responder for a request: hosted model or templates."""
import logging
from typing import Optional

from couples_chat.core.config import Settings
from couples_chat.services.context import AIResponse, QueryContext
from couples_chat.services.llm import CompletionProvider, generate_llm_response
from couples_chat.services.templates import generate_template_response

logger = logging.getLogger(__name__)


def use_hosted_model(settings: Settings) -> bool:
    if settings.chat_responder == "template":
        return False
    if settings.chat_responder == "llm":
        return True
    return bool(settings.provider_api_key)


def generate_response(
    ctx: QueryContext,
    settings: Settings,
    platform=None,
    provider: Optional[CompletionProvider] = None,
) -> AIResponse:
    """Reply to ctx.message. Errors from the hosted path propagate."""
    if provider is not None or use_hosted_model(settings):
        return generate_llm_response(ctx, settings, platform=platform, provider=provider)
    return generate_template_response(ctx)
