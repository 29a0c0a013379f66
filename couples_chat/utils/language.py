"""Language code normalization for replies and prompts."""
from typing import Optional

SUPPORTED_LANGUAGES = ("en", "es", "fr", "it", "de", "nl", "pt")


def normalize_language(code: Optional[str]) -> str:
    """
    Reduce a client language tag to a lower-case primary subtag.

    "pt-BR" -> "pt", " EN " -> "en", None/"" -> "en". Unsupported codes are
    kept as-is so the hosted model can still be asked to answer in them;
    template rendering falls back to English on its own.
    """
    if not code or not code.strip():
        return "en"
    return code.strip().lower().replace("_", "-").split("-")[0]


def is_supported(code: str) -> bool:
    """True if templates exist for this language."""
    return code in SUPPORTED_LANGUAGES
