"""Deterministic template responder: one render function per intent."""
import logging
import re
from typing import Callable, Dict, Optional

from couples_chat.services.classifier import Intent, classify_query
from couples_chat.services.context import AIResponse, QueryContext, UserContext
from couples_chat.services.features import extract_features
from couples_chat.utils.language import is_supported

logger = logging.getLogger(__name__)

TEMPLATE_MODEL = "template"

UPGRADE_NOTE = (
    "\n\n💡 Note: AI Relationship Coach is available in Premiere and Exclusive tiers. "
    "Consider upgrading to unlock this feature!"
)

_PARTNER_RE = re.compile(r"your partner|the partner", re.IGNORECASE)


def _partner(ctx: QueryContext, fallback: str = "your partner") -> str:
    return ctx.user_context.partner_name or fallback


# --- greeting ---------------------------------------------------------------

GREETINGS: Dict[str, str] = {
    "en": """Hello! 💕 I'm {assistant}, your relationship assistant. I'm here to help you and {partner} build deeper connections, resolve conflicts, and create lasting love.

What would you like help with today? I can:
• Show you around the platform
• Share relationship advice
• Suggest fun things to do together
• Help you talk through tough moments
• Support the plans you make as a couple

How can I support your relationship journey?""",
    "es": """¡Hola! 💕 Soy {assistant}, tu asistente de relaciones. Estoy aquí para ayudarte a ti y a {partner} a construir conexiones más profundas, resolver conflictos y crear un amor duradero.

¿En qué puedo ayudarte hoy?""",
    "fr": """Bonjour ! 💕 Je suis {assistant}, votre assistant relationnel. Je suis là pour vous aider, vous et {partner}, à construire des liens plus profonds, à résoudre les conflits et à créer un amour durable.

Comment puis-je vous aider aujourd'hui ?""",
    "it": """Ciao! 💕 Sono {assistant}, il tuo assistente per le relazioni. Sono qui per aiutare te e {partner} a costruire legami più profondi, risolvere i conflitti e creare un amore duraturo.

Come posso aiutarti oggi?""",
    "de": """Hallo! 💕 Ich bin {assistant}, dein Beziehungsassistent. Ich bin hier, um dir und {partner} zu helfen, tiefere Verbindungen aufzubauen, Konflikte zu lösen und dauerhafte Liebe zu schaffen.

Wobei kann ich dir heute helfen?""",
    "nl": """Hallo! 💕 Ik ben {assistant}, je relatie-assistent. Ik ben er om jou en {partner} te helpen diepere verbindingen op te bouwen, conflicten op te lossen en blijvende liefde te creëren.

Waarmee kan ik je vandaag helpen?""",
    "pt": """Olá! 💕 Sou o {assistant}, seu assistente de relacionamento. Estou aqui para ajudar você e {partner} a construir conexões mais profundas, resolver conflitos e criar um amor duradouro.

Como posso ajudar hoje?""",
}

PARTNER_FALLBACKS: Dict[str, str] = {
    "en": "your partner",
    "es": "tu pareja",
    "fr": "votre partenaire",
    "it": "il tuo partner",
    "de": "deinem Partner",
    "nl": "je partner",
    "pt": "seu parceiro",
}


def render_greeting(ctx: QueryContext) -> str:
    language = ctx.language if is_supported(ctx.language) else "en"
    return GREETINGS[language].format(
        assistant=ctx.assistant_name,
        partner=_partner(ctx, PARTNER_FALLBACKS[language]),
    )


# --- feature help -----------------------------------------------------------

# Checked in order; first hit names the feature in the reply.
FEATURE_HELP_NAMES = (
    ("love note", "Love Notes"),
    ("date idea", "Date Ideas"),
    ("goal", "Relationship Goals"),
    ("milestone", "Milestones"),
    ("memory", "Memory Lane"),
    ("journal", "Shared Journals"),
    ("calendar", "Couples Calendar"),
    ("quiz", "Relationship Quizzes"),
    ("coach", "AI Relationship Coach"),
    ("meditation", "Meditation"),
    ("community", "Community"),
)


def detect_feature_name(message: str) -> Optional[str]:
    lower = message.lower()
    for keyword, name in FEATURE_HELP_NAMES:
        if keyword in lower:
            return name
    return None


def render_feature_help(ctx: QueryContext) -> str:
    feature_name = detect_feature_name(ctx.message)
    if ctx.knowledge_context:
        return (
            f"{ctx.knowledge_context}\n\n"
            f"Would you like me to guide you through using {feature_name or 'this feature'}?"
        )
    return (
        f"I'd be happy to help you with {feature_name or 'platform features'}! "
        f"Based on your subscription tier ({ctx.user_context.subscription_tier}), you have access "
        "to various features. What specifically would you like to know?"
    )


# --- relationship advice ----------------------------------------------------

ADVICE_CONFLICT = """I understand communication challenges can be tough. Here are some constructive approaches:

**Immediate Steps:**
1. Pause when emotions run high - agree to step away and come back when you're both calmer
2. Use "I" statements instead of "you" statements - "I feel..." rather than "You always..."
3. Practice active listening - repeat back what you heard before you respond

**Platform Tools That Can Help:**
• Communication Practice - Interactive scenarios for healthier conversations
• AI Relationship Coach - Personalized strategies for your situation
• Articles on conflict resolution - Expert guidance

Would you like me to walk you through a communication exercise, or help you find relevant resources?"""

ADVICE_CONNECTION = """Building intimacy and connection takes intentional effort. Here are some ideas:

**Connection Building Activities:**
• Plan regular date nights with the Date Ideas feature
• Send surprise Love Notes to express your feelings
• Try something new together with Cooperative Games
• Take Relationship Quizzes to discover new things about each other
• Practice Meditation together for a calmer, deeper bond

**Platform Features:**
• Memory Lane - Capture and cherish special moments
• Shared Journals - Write together and document your journey
• Relationship Goals - Set goals to grow closer together

Which area of your connection would you like to focus on?"""

ADVICE_GOALS = """Setting relationship goals is a great way to grow together! Here's how:

**Creating Relationship Goals:**
1. Pick an area you both want to improve (communication, intimacy, shared activities...)
2. Set one specific, achievable goal
3. Break it down into small steps
4. Track your progress together
5. Celebrate each achievement along the way

**Platform Support:**
• Relationship Goals - Set and track goals with action steps
• Progress Tracking - See how your relationship grows
• Milestones - Celebrate important moments

Would you like help creating a specific relationship goal?"""

ADVICE_GENERAL = """I'm here to support your relationship journey. Here are some general tips:

**Building a Stronger Relationship:**
• Regular check-ins and open communication
• Quality time together (Date Ideas can inspire you)
• Express appreciation (Love Notes are perfect for this)
• Work on goals together (Relationship Goals feature)
• Celebrate milestones and memories

**When You Need More Support:**
• Communication Practice for working through conflict
• Counseling Support for professional help
• Articles and Podcasts with expert advice

What specific part of your relationship would you like to work on?"""


def render_relationship_advice(ctx: QueryContext) -> str:
    lower = ctx.message.lower()
    if any(k in lower for k in ("communication", "argue", "fight")):
        return ADVICE_CONFLICT
    if any(k in lower for k in ("intimacy", "connection", "spark")):
        return ADVICE_CONNECTION
    if any(k in lower for k in ("goal", "improve")):
        return ADVICE_GOALS
    return ADVICE_GENERAL


# --- date ideas -------------------------------------------------------------

DATE_IDEAS: Dict[str, str] = {
    "free": """Here are some wonderful free date ideas:

**Free Date Ideas:**
• Stargazing picnic with food from home
• A sunset walk at the beach or park
• Movie marathon at home in a cozy blanket fort
• Explore a new neighborhood on foot
• Cook together with what's already in the kitchen
• Visit a local museum on a free-entry day
• A scenic hike or nature walk

Would you like me to help you plan one of these, or come up with a custom date idea?""",
    "luxury": """Here are some luxurious date ideas:

**Luxury Date Ideas:**
• Fine dining at a top restaurant
• A couples spa day
• Weekend getaway to a romantic destination
• Private wine tasting
• Hot air balloon ride
• Luxury hotel staycation
• Private boat charter at sunset

Would you like help planning a special luxury date?""",
    "any": """Here are some great date ideas for any budget:

**Budget-Friendly:**
• Coffee shop date
• Picnic in the park
• Museum visit
• Home movie night

**Mid-Range:**
• Cooking class together
• Wine tasting
• Escape room
• Concert or show

**Special Occasions:**
• Weekend getaway
• Fine dining experience
• Spa day
• Surprise adventure

What kind of date are you looking for? I can help you find the perfect one!""",
}


def detect_budget(message: str) -> str:
    lower = message.lower()
    if any(k in lower for k in ("free", "budget", "cheap")):
        return "free"
    if any(k in lower for k in ("expensive", "luxury")):
        return "luxury"
    return "any"


def render_date_ideas(ctx: QueryContext) -> str:
    return DATE_IDEAS[detect_budget(ctx.message)]


# --- content generation -----------------------------------------------------

POEM = """Here's a personalized poem for {partner}:

**A Love Note for {partner}**

In the quiet moments that we share,
I find a gratitude beyond compare.
You light the corners of my day
In the simplest and the grandest way.

Through laughter, tears and all between,
You are the heart of every scene.
Together we grow, together we learn,
And to your love I'll always return.

💕

Would you like me to customize this further or try a different style of poem?"""

LOVE_NOTE = """Here's a personalized love note for {partner}:

**My Dearest {partner},**

I wanted to take a moment to tell you how much you mean to me. Having you in my life brings so much joy and meaning.

Every day with you is a gift, and I'm grateful for the love we share. Whether we're laughing together, working through challenges, or simply enjoying each other's company, I feel lucky to have you by my side.

Thank you for being you, and for being mine.

With all my love 💕

---

Would you like me to adjust this message or write one for a specific occasion?"""

APOLOGY = """Here's a thoughtful apology message:

**I'm Sorry, {partner}**

I want to apologize for [the situation]. I realize my actions and words hurt you, and that's the last thing I ever want to do.

I understand now how this affected you, and I take full responsibility. Your feelings matter to me, and I'm committed to doing better.

I hope we can talk about it and work through it together. I value us and want to make things right.

With love,
[Your name]

---

Would you like me to personalize this further based on your situation?"""

CONTENT_MENU = """I can help you create personalized content! I can write:
• Love notes and messages
• Poems
• Apology messages
• Anniversary notes
• Affirmations

What would you like me to create for {partner}?"""


def render_content_generation(ctx: QueryContext) -> str:
    lower = ctx.message.lower()
    partner = _partner(ctx)
    if "poem" in lower:
        return POEM.format(partner=partner)
    if any(k in lower for k in ("love note", "message", "note")):
        return LOVE_NOTE.format(partner=partner)
    if any(k in lower for k in ("apology", "sorry")):
        return APOLOGY.format(partner=partner)
    return CONTENT_MENU.format(partner=partner)


# --- subscription info ------------------------------------------------------

SUBSCRIPTION_INFO: Dict[str, str] = {
    "Basis": """You're on the **Basis (FREE)** plan! Here's what you have access to:

✅ 50+ Love Notes Library
✅ Basic Relationship Quizzes
✅ 5 Date Ideas per month
✅ Anniversary Reminders
✅ Digital Memory Timeline
✅ Mobile App Access
✅ Email Support

**Want more?** Consider upgrading to Premiere ($19.99/month) for:
• 1000+ Love Notes
• AI Relationship Coach (50 questions/month)
• Unlimited Date Ideas
• Relationship Goals Tracker
• Advanced Quizzes
• And much more!""",
    "Premiere": """You're on the **Premiere ($19.99/month)** plan - great choice! ⭐

✅ 1000+ Love Notes Library
✅ AI Relationship Coach (50 questions/month)
✅ Unlimited Date Ideas with Filters
✅ Relationship Goals Tracker
✅ Advanced Quizzes & Compatibility Tests
✅ Schedule Surprise Messages
✅ Ad-Free Experience
✅ Priority Support

You're getting great value! Want even more? The Exclusive tier adds unlimited everything plus the AI Content Creator.""",
    "Exclusive": """You're on the **Exclusive ($34.99/month)** plan - the full experience! 🎉

✅ Unlimited Love Notes Library
✅ Unlimited AI Relationship Coach
✅ AI Content Creator (poems, letters)
✅ Personalized Relationship Reports
✅ Exclusive Couples Community Access
✅ Monthly Contest Entry for Prizes
✅ LGBTQ+ Specialized Resources
✅ 1-on-1 Expert Consultation (1/month)
✅ Premium WhatsApp Support
✅ VIP Badge & Recognition

You have access to everything! How can I help you make the most of your subscription?""",
}


def resolve_tier(tier: Optional[str]) -> str:
    """Canonical tier name; anything unrecognized is treated as Basis."""
    for name in SUBSCRIPTION_INFO:
        if tier and tier.strip().lower() == name.lower():
            return name
    return "Basis"


def render_subscription_info(ctx: QueryContext) -> str:
    return SUBSCRIPTION_INFO[resolve_tier(ctx.user_context.subscription_tier)]


RESPONSE_TEMPLATES: Dict[Intent, Callable[[QueryContext], str]] = {
    Intent.GREETING: render_greeting,
    Intent.FEATURE_HELP: render_feature_help,
    Intent.RELATIONSHIP_ADVICE: render_relationship_advice,
    Intent.DATE_IDEAS: render_date_ideas,
    Intent.CONTENT_GENERATION: render_content_generation,
    Intent.SUBSCRIPTION_INFO: render_subscription_info,
}

_missing = set(Intent) - set(RESPONSE_TEMPLATES)
if _missing:
    raise RuntimeError(f"No response template for intents: {sorted(i.value for i in _missing)}")


def render_template(intent: Intent, ctx: QueryContext) -> str:
    return RESPONSE_TEMPLATES[intent](ctx)


def personalize_response(text: str, user_context: UserContext) -> str:
    """Swap generic partner references for the name and add the tier upsell. Idempotent."""
    if user_context.partner_name:
        partner_name = user_context.partner_name
        text = _PARTNER_RE.sub(lambda _match: partner_name, text)
    if (
        resolve_tier(user_context.subscription_tier) == "Basis"
        and "AI Relationship Coach" in text
        and not text.endswith(UPGRADE_NOTE)
    ):
        text += UPGRADE_NOTE
    return text


def generate_template_response(ctx: QueryContext) -> AIResponse:
    """Classify, render, personalize, then extract suggested features."""
    intent = classify_query(ctx.message)
    logger.info(f"Template responder: intent={intent.value} language={ctx.language}")
    content = personalize_response(render_template(intent, ctx), ctx.user_context)
    return AIResponse(
        content=content,
        model=TEMPLATE_MODEL,
        features_suggested=extract_features(content),
    )
