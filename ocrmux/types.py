from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .errors import ErrorRecord

# =============================================================================
# Type Definitions
# =============================================================================


class Provider(str, Enum):
    """
    Supported LLM providers.
    """
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"


class Role(str, Enum):
    """
    Author of a conversation turn.

    Each provider spells these differently on the wire ("assistant" vs
    "model"); see the provider's ``role_names``.
    """
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """
    A single message in a conversation.
    """
    role: Role
    text: str


# =============================================================================
# Result Type
# =============================================================================

@dataclass
class ChatResult:
    """
    Outcome of one completion call.

    Holds exactly one of ``text`` (the normalized response string) or
    ``error`` (an ErrorRecord).

    Attributes:
        provider: Name of the provider that handled the call.
        text: Normalized response text on success.
        error: Classified failure on error.
        meta: Call metadata (model, latency_ms, status_code, route, fallback).
    """
    provider: str
    text: Optional[str] = None
    error: Optional[ErrorRecord] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if (self.text is None) == (self.error is None):
            raise ValueError("ChatResult needs exactly one of text or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, provider: str, text: str, **meta) -> "ChatResult":
        return cls(provider=provider, text=text, meta=meta)

    @classmethod
    def failure(cls, provider: str, error: ErrorRecord, **meta) -> "ChatResult":
        return cls(provider=provider, error=error, meta=meta)
