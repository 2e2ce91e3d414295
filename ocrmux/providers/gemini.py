from typing import Any, Dict, Optional, Tuple

from .base import BaseLLMProvider
from ..config import BASE_URLS
from ..types import ConversationTurn, Provider, Role


class GeminiProvider(BaseLLMProvider):
    """
    Provider for the Google Gemini ``generateContent`` REST API.

    The model id is part of the URL path and the API key travels as the
    ``key`` query parameter instead of a header.
    """

    name = Provider.GEMINI.value
    display_name = "Gemini"
    default_base_url = BASE_URLS[Provider.GEMINI]
    role_names = {Role.USER: "user", Role.ASSISTANT: "model"}

    def endpoint(self, model: str) -> str:
        # Model listings return "models/<id>"; accept either spelling
        if model.startswith("models/"):
            model = model[len("models/"):]
        return f"{self.base_url}/models/{model}:generateContent"

    def auth_headers(self) -> Dict[str, str]:
        return {}

    def auth_params(self) -> Dict[str, str]:
        return {"key": self.api_key}

    def build_request(
        self,
        model: str,
        history: Tuple[ConversationTurn, ...],
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": [
                {"role": self.role_names[turn.role], "parts": [{"text": turn.text}]}
                for turn in history
            ],
        }
        if system_instruction:
            payload["system_instruction"] = {"parts": [{"text": system_instruction}]}
        if max_tokens is not None:
            payload["generationConfig"] = {"maxOutputTokens": max_tokens}
        return payload

    def parse_response(self, data: Any) -> Optional[str]:
        # A blocked prompt comes back as 200 with no candidates
        candidates = data.get("candidates")
        if not candidates:
            return None
        content = candidates[0].get("content") or {}
        parts = content.get("parts") or []
        if not parts:
            return None
        return parts[0].get("text")

    def parse_error(self, data: Any) -> Optional[str]:
        # Some endpoints wrap the error object in a one-element list
        if isinstance(data, list) and data:
            data = data[0]
        return data["error"]["message"]

    def parse_usage(self, data: Any) -> Optional[Dict[str, Any]]:
        usage = data.get("usageMetadata")
        if not isinstance(usage, dict):
            return None
        return self.normalize_usage(
            self.name,
            input_tokens=usage.get("promptTokenCount"),
            output_tokens=usage.get("candidatesTokenCount"),
            total_tokens=usage.get("totalTokenCount"),
            raw=usage,
        )
