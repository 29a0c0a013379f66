"""Hosted LLM responder: system prompt assembly and completion providers."""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from couples_chat.core.config import Settings
from couples_chat.core.errors import ConfigurationError, UpstreamError
from couples_chat.core.prompts import build_platform_system_prompt, build_system_message, prepare_history
from couples_chat.services.context import AIResponse, QueryContext
from couples_chat.services.features import extract_features

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionParams:
    temperature: float
    max_tokens: int


@dataclass
class Completion:
    text: str
    model: str
    tokens: Optional[int] = None


class CompletionProvider(ABC):
    """Chat-completion capability: one system prompt plus role-tagged history."""

    provider_name: str = "base"

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    def complete(self, system_prompt: str, history: List[Dict[str, str]], params: CompletionParams) -> Completion:
        """
        Args:
            system_prompt: Full system message
            history: [{"role": "user"|"assistant", "content": ...}], oldest first,
                ending with the new user message
            params: Sampling limits

        Raises:
            UpstreamError: the provider call failed or returned nothing usable
        """
        ...


def _build_safety_settings() -> List[types.SafetySetting]:
    """Block only HIGH probability content; relationship topics trip MEDIUM often."""
    return [
        types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH)
        for category in (
            types.HarmCategory.HARM_CATEGORY_HARASSMENT,
            types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
            types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
            types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
        )
    ]


class GeminiProvider(CompletionProvider):
    """Google Gemini via google-genai."""

    provider_name = "gemini"

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.5-flash", client=None):
        super().__init__(model)
        if client is not None:
            self.client = client
            return
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY not configured")
        self.client = genai.Client(api_key=api_key)

    @staticmethod
    def _history_to_contents(history: List[Dict[str, str]]) -> List[types.Content]:
        """Gemini calls the assistant role "model"."""
        return [
            types.Content(
                role="user" if msg["role"] == "user" else "model",
                parts=[types.Part.from_text(text=msg["content"])],
            )
            for msg in history
        ]

    def complete(self, system_prompt: str, history: List[Dict[str, str]], params: CompletionParams) -> Completion:
        config = types.GenerateContentConfig(
            thinking_config=types.ThinkingConfig(thinking_budget=0),
            system_instruction=system_prompt,
            max_output_tokens=params.max_tokens,
            temperature=params.temperature,
            safety_settings=_build_safety_settings(),
        )
        logger.info(f"Calling Gemini LLM API with model: {self.model}")
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=self._history_to_contents(history),
                config=config,
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise UpstreamError(f"Gemini API error: {e.code}") from e
        except Exception as e:
            logger.error(f"Gemini request failed: {e}", exc_info=True)
            raise UpstreamError("Gemini request failed") from e

        if not response.candidates or not response.candidates[0].content or not response.candidates[0].content.parts:
            raise UpstreamError("No response content from Gemini LLM")

        candidate = response.candidates[0]
        finish_reason = str(getattr(candidate, "finish_reason", None) or "UNKNOWN")
        if "MAX_TOKENS" in finish_reason:
            logger.warning(f"Response truncated due to MAX_TOKENS (current: {params.max_tokens})")
        elif "SAFETY" in finish_reason or "RECITATION" in finish_reason:
            logger.warning(f"Response affected by filters: {finish_reason}")

        text = " ".join(part.text for part in candidate.content.parts if getattr(part, "text", None))
        if not text.strip():
            raise UpstreamError("No text content in Gemini response parts")

        usage = getattr(response, "usage_metadata", None)
        tokens = getattr(usage, "total_token_count", None) if usage else None
        logger.info(f"Gemini response length: {len(text)} characters")
        return Completion(text=text, model=self.model, tokens=tokens)


class OpenAIProvider(CompletionProvider):
    """OpenAI chat completions."""

    provider_name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini", client=None):
        super().__init__(model)
        if client is not None:
            self.client = client
            return
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY not configured")
        self.client = openai.OpenAI(api_key=api_key)

    def complete(self, system_prompt: str, history: List[Dict[str, str]], params: CompletionParams) -> Completion:
        messages = [{"role": "system", "content": system_prompt}] + list(history)
        logger.info(f"Calling OpenAI API with model: {self.model}")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
            )
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API error: {e}")
            raise UpstreamError(f"OpenAI API error: {e.status_code}") from e
        except openai.APIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise UpstreamError("OpenAI request failed") from e

        if not response.choices or not response.choices[0].message.content:
            raise UpstreamError("No response content from OpenAI")

        usage = getattr(response, "usage", None)
        return Completion(
            text=response.choices[0].message.content,
            model=getattr(response, "model", None) or self.model,
            tokens=getattr(usage, "total_tokens", None) if usage else None,
        )


def get_completion_provider(settings: Settings, client=None) -> CompletionProvider:
    """Provider selected by settings.ai_provider. Raises ConfigurationError without a credential."""
    if settings.ai_provider == "openai":
        return OpenAIProvider(api_key=settings.openai_api_key, model=settings.openai_model, client=client)
    return GeminiProvider(api_key=settings.gemini_api_key, model=settings.llm_model, client=client)


def build_llm_messages(ctx: QueryContext, platform=None) -> tuple:
    """(system_prompt, history ending with the new user message)."""
    system_prompt = build_system_message(
        build_platform_system_prompt(platform),
        ctx.user_context,
        ctx.knowledge_context,
        ctx.language,
    )
    history = prepare_history(ctx.conversation_history)
    history.append({"role": "user", "content": ctx.message})
    return system_prompt, history


def generate_llm_response(
    ctx: QueryContext,
    settings: Settings,
    platform=None,
    provider: Optional[CompletionProvider] = None,
) -> AIResponse:
    """
    Generate a reply with the hosted model.

    Raises:
        ConfigurationError: provider credential missing
        UpstreamError: provider call failed (no retry)
    """
    provider = provider or get_completion_provider(settings)
    system_prompt, history = build_llm_messages(ctx, platform)
    logger.debug(f"LLM request: {len(history)} messages, system prompt length {len(system_prompt)}")
    completion = provider.complete(
        system_prompt,
        history,
        CompletionParams(temperature=settings.llm_temperature, max_tokens=settings.llm_max_tokens),
    )
    return AIResponse(
        content=completion.text,
        model=completion.model,
        tokens=completion.tokens,
        features_suggested=extract_features(completion.text),
    )
