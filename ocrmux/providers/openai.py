from typing import Any, Dict, List, Optional, Tuple

from .base import BaseLLMProvider
from ..config import BASE_URLS
from ..types import ConversationTurn, Provider
from ..utils import create_image_content, create_text_content


class OpenAIProvider(BaseLLMProvider):
    """
    Provider for OpenAI-compatible chat completion APIs (OpenAI, DeepSeek, etc.).

    The only provider that accepts image input: image bytes are attached to
    the latest user message as an inline ``data:`` URI.
    """

    name = Provider.OPENAI.value
    display_name = "OpenAI"
    default_base_url = BASE_URLS[Provider.OPENAI]
    supports_images = True

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        provider_name: str = "openai",
        **kwargs,
    ):
        super().__init__(api_key, base_url, **kwargs)
        self.name = provider_name

    def endpoint(self, model: str) -> str:
        return f"{self.base_url}/chat/completions"

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def build_request(
        self,
        model: str,
        history: Tuple[ConversationTurn, ...],
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Build a chat completions payload.

        The system instruction has no dedicated field in this API, so it is
        sent as a leading message with role "system".
        """
        messages: List[Dict[str, Any]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.extend(self.wire_messages(history))

        if image is not None:
            self._attach_image(messages, image)

        payload: Dict[str, Any] = {"model": model, "messages": messages}
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return payload

    @staticmethod
    def _attach_image(messages: List[Dict[str, Any]], image: bytes) -> None:
        image_part = create_image_content(image)
        for msg in reversed(messages):
            if msg["role"] == "user":
                msg["content"] = [create_text_content(msg["content"]), image_part]
                return
        messages.append({"role": "user", "content": [image_part]})

    def parse_response(self, data: Any) -> Optional[str]:
        choices = data["choices"]
        if not choices:
            return None
        content = choices[0]["message"].get("content")

        # Some compatible servers return a list of content parts
        if isinstance(content, list):
            return "".join(
                part.get("text", "")
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return content

    def parse_usage(self, data: Any) -> Optional[Dict[str, Any]]:
        usage = data.get("usage")
        if not isinstance(usage, dict):
            return None
        return self.normalize_usage(
            self.name,
            input_tokens=usage.get("prompt_tokens"),
            output_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
            raw=usage,
        )
