from typing import Any, Dict, Optional, Tuple

from .base import BaseLLMProvider
from ..config import ANTHROPIC_VERSION, BASE_URLS, DEFAULT_MAX_TOKENS
from ..types import ConversationTurn, Provider


class AnthropicProvider(BaseLLMProvider):
    """
    Provider for the Anthropic (Claude) Messages API.

    Requires a non-empty history and always sends ``max_tokens``.
    """

    name = Provider.ANTHROPIC.value
    display_name = "Anthropic"
    default_base_url = BASE_URLS[Provider.ANTHROPIC]
    requires_history = True

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        **kwargs,
    ):
        super().__init__(api_key, base_url, **kwargs)
        self.max_tokens = max_tokens

    def endpoint(self, model: str) -> str:
        return f"{self.base_url}/messages"

    def auth_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_request(
        self,
        model: str,
        history: Tuple[ConversationTurn, ...],
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens if max_tokens is not None else self.max_tokens,
        }
        # System prompt is a top-level field, not a message
        if system_instruction:
            payload["system"] = system_instruction
        payload["messages"] = self.wire_messages(history)
        return payload

    def parse_response(self, data: Any) -> Optional[str]:
        for block in data["content"]:
            if isinstance(block, dict) and block.get("type") == "text":
                return block.get("text")
        return None

    def parse_usage(self, data: Any) -> Optional[Dict[str, Any]]:
        usage = data.get("usage")
        if not isinstance(usage, dict):
            return None
        return self.normalize_usage(
            self.name,
            input_tokens=usage.get("input_tokens"),
            output_tokens=usage.get("output_tokens"),
            total_tokens=None,
            raw=usage,
        )
