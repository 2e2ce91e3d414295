import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from ..config import DEFAULT_TIMEOUT
from ..errors import ErrorRecord, ProviderError
from ..types import ChatResult, ConversationTurn, Role

logger = logging.getLogger(__name__)

# Failures raised while walking a decoded JSON body of the wrong shape.
_SHAPE_ERRORS = (KeyError, IndexError, TypeError, AttributeError)


class BaseLLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    Implements the single completion call shared by every provider:
    precondition checks, request encoding, one authenticated POST, response
    decoding and error classification. Subclasses describe the wire format
    through class attributes and a handful of hooks:

    - ``endpoint``, ``auth_headers``, ``auth_params``: where and how to send.
    - ``build_request``: provider-specific JSON payload.
    - ``parse_response``: extract the first text-bearing element.
    - ``parse_error``: extract the message from a structured error body.
    - ``parse_usage``: optional token usage.
    """

    name: str = ""
    display_name: str = ""
    default_base_url: str = ""
    role_names: Dict[Role, str] = {Role.USER: "user", Role.ASSISTANT: "assistant"}
    requires_history: bool = False
    supports_images: bool = False

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: Provider API key. Empty or None makes every call fail
                     with CREDENTIAL_MISSING.
            base_url: Overrides the provider's default API base URL.
            timeout: Upper bound in seconds for the whole request/response exchange.
            http_client: Shared transport. Created (and owned) here if omitted.
        """
        self.api_key = api_key or ""
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout = timeout
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "BaseLLMProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ==========================================================================
    # Provider Hooks
    # ==========================================================================

    @abstractmethod
    def endpoint(self, model: str) -> str:
        """Return the absolute URL to POST to for ``model``."""

    @abstractmethod
    def auth_headers(self) -> Dict[str, str]:
        """Return the authentication headers for a request."""

    def auth_params(self) -> Dict[str, str]:
        """Return query parameters carrying credentials, if any."""
        return {}

    @abstractmethod
    def build_request(
        self,
        model: str,
        history: Tuple[ConversationTurn, ...],
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Build the provider's JSON request payload.

        Args:
            model (str): The model identifier.
            history (Tuple[ConversationTurn, ...]): Conversation turns, oldest first.
            system_instruction (str, optional): High-level instruction for the model.
            image (bytes, optional): Image to attach to the latest user turn.
                                     Only passed when ``supports_images`` is set.
            max_tokens (int, optional): Maximum number of tokens to generate.

        Returns:
            Dict[str, Any]: The payload, ready for JSON encoding.
        """

    @abstractmethod
    def parse_response(self, data: Any) -> Optional[str]:
        """
        Extract the response text from a decoded success body.

        Returns None when the body holds no text-bearing element. Raising
        KeyError, IndexError, TypeError or AttributeError signals a body of
        the wrong shape.
        """

    def parse_error(self, data: Any) -> Optional[str]:
        """
        Extract the message from a decoded error body.

        All supported providers nest it as ``{"error": {"message": ...}}``.
        """
        return data["error"]["message"]

    def parse_usage(self, data: Any) -> Optional[Dict[str, Any]]:
        return None

    def wire_messages(self, history: Iterable[ConversationTurn]) -> List[Dict[str, Any]]:
        """
        Map turns to ``{"role", "content"}`` messages using ``role_names``.
        """
        return [
            {"role": self.role_names[turn.role], "content": turn.text}
            for turn in history
        ]

    # ==========================================================================
    # Completion
    # ==========================================================================

    async def complete(
        self,
        model: str,
        history: Iterable[ConversationTurn],
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatResult:
        """
        Send one completion request and return the normalized result.

        No exception escapes this method for failures reachable from network
        I/O, encoding or decoding; they come back as a failed ChatResult.
        History is copied up front and never modified.

        Args:
            model (str): The model identifier.
            history (Iterable[ConversationTurn]): Conversation turns, oldest first.
            system_instruction (str, optional): High-level instruction for the model.
            image (bytes, optional): Raw image bytes to attach to the latest user turn.
            max_tokens (int, optional): Maximum number of tokens to generate.

        Returns:
            ChatResult: The response text or the classified error, with
            ``meta`` holding model, latency_ms, status_code and usage.
        """
        turns = tuple(history)
        meta: Dict[str, Any] = {"model": model}
        start = time.perf_counter()

        try:
            self._check_preconditions(turns)
            url = self._checked_url(model)

            if image is not None and not self.supports_images:
                logger.warning("%s does not accept image input; sending text only", self.name)
                image = None

            body = self._encode(model, turns, system_instruction, image, max_tokens)
            logger.debug(
                "%s request: model=%s turns=%d image=%s",
                self.name, model, len(turns), image is not None,
            )

            response = await self._send(url, body)
            meta["status_code"] = response.status_code
            text, data = self._decode(response)
        except ProviderError as exc:
            meta["latency_ms"] = (time.perf_counter() - start) * 1000.0
            logger.warning("%s call to %s failed: %s", self.name, model, exc.record.describe())
            return ChatResult.failure(self.name, exc.record, **meta)

        meta["latency_ms"] = (time.perf_counter() - start) * 1000.0
        meta["usage"] = self._usage(data)
        logger.debug(
            "%s response: model=%s status=%s latency_ms=%.1f",
            self.name, model, meta["status_code"], meta["latency_ms"],
        )
        return ChatResult.success(self.name, text, **meta)

    def _check_preconditions(self, turns: Tuple[ConversationTurn, ...]) -> None:
        if not self.api_key:
            raise ProviderError(ErrorRecord.credential_missing(self.display_name or self.name))
        if self.requires_history and not turns:
            raise ProviderError(ErrorRecord.no_content())

    def _checked_url(self, model: str) -> str:
        raw = self.endpoint(model)
        try:
            url = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ProviderError(ErrorRecord.invalid_endpoint(str(raw))) from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ProviderError(ErrorRecord.invalid_endpoint(raw))
        return raw

    def _encode(self, model, turns, system_instruction, image, max_tokens) -> bytes:
        try:
            payload = self.build_request(model, turns, system_instruction, image, max_tokens)
            return json.dumps(payload).encode("utf-8")
        except (ValueError,) + _SHAPE_ERRORS as exc:
            raise ProviderError(ErrorRecord.decoding_error(exc)) from exc

    async def _send(self, url: str, body: bytes) -> httpx.Response:
        headers = {"content-type": "application/json", **self.auth_headers()}
        try:
            return await asyncio.wait_for(
                self.client.post(url, content=body, headers=headers, params=self.auth_params() or None),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise ProviderError(ErrorRecord.timeout(self.timeout, exc)) from exc
        except httpx.HTTPError as exc:
            message = str(exc) or type(exc).__name__
            raise ProviderError(ErrorRecord.request_failed(message, cause=exc)) from exc

    def _decode(self, response: httpx.Response) -> Tuple[str, Any]:
        if not response.is_success:
            raise ProviderError(
                ErrorRecord.request_failed(self._error_message(response), response.status_code)
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(ErrorRecord.decoding_error(exc)) from exc

        try:
            text = self.parse_response(data)
        except _SHAPE_ERRORS as exc:
            raise ProviderError(ErrorRecord.decoding_error(exc)) from exc

        if text is not None and not isinstance(text, str):
            cause = TypeError(f"expected text, got {type(text).__name__}")
            raise ProviderError(ErrorRecord.decoding_error(cause))
        if not text:
            raise ProviderError(ErrorRecord.no_content())
        return text, data

    def _usage(self, data: Any) -> Optional[Dict[str, Any]]:
        # Usage is informational; a malformed block never fails the call.
        try:
            return self.parse_usage(data)
        except _SHAPE_ERRORS:
            return None

    def _error_message(self, response: httpx.Response) -> str:
        # Structured body first, then the raw text.
        try:
            message = self.parse_error(response.json())
        except (ValueError,) + _SHAPE_ERRORS:
            message = None
        if isinstance(message, str) and message:
            return message
        return response.text or "Unknown error"

    # ==========================================================================
    # Usage
    # ==========================================================================

    @staticmethod
    def normalize_usage(
        provider: str,
        *,
        input_tokens: Optional[int],
        output_tokens: Optional[int],
        total_tokens: Optional[int],
        raw: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """
        Normalize token usage information across providers.

        Creates a standardized dictionary structure for token usage statistics,
        optionally calculating totals if missing.

        Args:
            provider (str): Name of the provider.
            input_tokens (int, optional): Number of prompt tokens.
            output_tokens (int, optional): Number of generated tokens.
            total_tokens (int, optional): Total token count.
            raw (dict, optional): Raw usage data from the provider response.

        Returns:
            Dict[str, Any]: Standardized usage dictionary.
        """
        if total_tokens is None and input_tokens is not None and output_tokens is not None:
            total_tokens = input_tokens + output_tokens

        return {
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": total_tokens,
            "raw": {
                "provider": provider,
                **(raw or {}),
            } if raw is not None else None,
        }
