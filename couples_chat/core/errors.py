"""Error taxonomy and best-effort lookup results."""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ChatbotError(Exception):
    """Base error for the chatbot backend."""

    status_code = 500
    public_message = "An error occurred processing your request."


class ValidationError(ChatbotError):
    """Missing or malformed request fields."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)


class ConfigurationError(ChatbotError):
    """A required credential or setting is absent."""


class UpstreamError(ChatbotError):
    """An external store or completion provider call failed."""


class NotFoundError(ChatbotError):
    """A referenced tenant or record does not exist."""

    status_code = 404

    @property
    def public_message(self) -> str:
        return str(self)


@dataclass
class Lookup(Generic[T]):
    """Result of a best-effort enrichment step.

    ``value`` is always usable (possibly empty or partial); ``error`` is set
    when the lookup failed rather than simply finding nothing.
    """

    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
