"""Prompt templates for hosted LLM interactions."""
import json
from typing import Dict, List

# Base persona used when a platform has no custom system prompt
DEFAULT_SYSTEM_PROMPT = """You are a warm, empathetic, and knowledgeable relationship assistant for a platform designed to help committed couples build deeper connections, resolve conflicts, and create lasting love.

**Your Personality:**
- Warm & Empathetic: understanding and supportive
- Encouraging: motivates and celebrates progress
- Professional: knowledgeable about relationships
- Non-judgmental: a safe space for all relationship types
- Inclusive: supports all couples (LGBTQ+, diverse backgrounds)

**Your Communication Style:**
- Conversational, natural and friendly
- Action-oriented: give specific, actionable advice
- Respectful of relationship boundaries
- Culturally sensitive

**Important Guidelines:**
- Always respond in the user's preferred language (EN, ES, FR, IT, DE, NL, PT)
- Be aware of the user's subscription tier and feature limits
- Suggest relevant platform features when appropriate
- Never take sides; never shame or blame either partner
- Recognize crisis situations (domestic violence, abuse) and point to professional help and hotlines
- You are not a replacement for therapy; suggest professional help when needed
- Ask clarifying questions when needed

**Response Format:**
- Clear, concise answers
- Lists or steps when helpful
- Emojis sparingly (💕, 😊, 💡)
- End with a follow-up question or a clear next step"""

PLATFORM_NAME_ANCHOR = "a platform designed to help"


def build_platform_system_prompt(platform=None, default_prompt: str = DEFAULT_SYSTEM_PROMPT) -> str:
    """
    Base persona for a tenant.

    No platform -> default prompt. A platform with its own system_prompt uses
    it verbatim. Otherwise the default prompt is branded with the platform
    name, mission statement, feature list and subscription tiers.
    """
    if platform is None:
        return default_prompt
    if platform.system_prompt:
        return platform.system_prompt

    prompt = default_prompt.replace(
        PLATFORM_NAME_ANCHOR, f"{platform.name}, {PLATFORM_NAME_ANCHOR}", 1
    )
    if platform.mission_statement:
        prompt += f'\n\n**Platform Mission:**\n"{platform.mission_statement}"'
    if platform.features:
        prompt += "\n\n**Platform Features:**\n"
        prompt += "".join(f"{i}. {feature}\n" for i, feature in enumerate(platform.features, start=1))
    if platform.subscription_tiers:
        prompt += "\n\n**Subscription Tiers:**\n"
        for tier_name, tier_info in platform.subscription_tiers.items():
            prompt += f"- **{tier_name}**: {json.dumps(tier_info, ensure_ascii=False)}\n"
    return prompt


def build_system_message(base_prompt: str, user_context, knowledge_context: str, language: str) -> str:
    """Persona + user context + retrieved knowledge + language directive, in that order."""
    message = base_prompt

    lines = []
    if user_context is not None:
        if user_context.subscription_tier:
            lines.append(f"- Subscription Tier: {user_context.subscription_tier}")
        if user_context.partner_name:
            lines.append(f"- Partner Name: {user_context.partner_name}")
        if user_context.relationship_goals:
            lines.append("- Active Goals: " + ", ".join(g.title for g in user_context.relationship_goals))
        if user_context.upcoming_milestones:
            lines.append("- Upcoming Milestones: " + ", ".join(m.title for m in user_context.upcoming_milestones))
    if lines:
        message += "\n\n**User Context:**\n" + "\n".join(lines) + "\n"

    if knowledge_context:
        message += f"\n\n**Relevant Platform Information:**\n{knowledge_context}\n"

    message += f"\n\n**Important:** Respond in {language.upper()} language."
    return message


def prepare_history(conversation_history: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """
    Normalize history to {"role": "user"|"assistant", "content": ...}, oldest first.
    System messages and empty turns are dropped.
    """
    formatted = []
    for msg in conversation_history or []:
        role = msg.get("role")
        content = msg.get("content") or ""
        if role == "system" or not content:
            continue
        formatted.append({"role": "assistant" if role == "assistant" else "user", "content": content})
    return formatted
