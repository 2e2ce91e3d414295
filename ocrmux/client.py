import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

import httpx

from . import credentials
from .config import AVAILABLE_MODELS, Settings
from .providers.base import BaseLLMProvider
from .providers.openai import OpenAIProvider
from .providers.anthropic import AnthropicProvider
from .providers.gemini import GeminiProvider
from .providers.deepseek import DeepSeekProvider
from .types import ChatResult, ConversationTurn, Provider, Role

logger = logging.getLogger(__name__)

# Ordered (substring, provider) table, matched case-insensitively against the
# model id. First match wins; no match falls back to DEFAULT_PROVIDER.
MODEL_ROUTES: Tuple[Tuple[str, Provider], ...] = (
    ("claude", Provider.ANTHROPIC),
    ("gemini", Provider.GEMINI),
    ("deepseek", Provider.DEEPSEEK),
    ("gpt", Provider.OPENAI),
)
DEFAULT_PROVIDER = Provider.OPENAI


@dataclass(frozen=True)
class Route:
    """
    Provider selected for a model id.

    Attributes:
        provider: The selected provider.
        matched: The MODEL_ROUTES substring that matched, or None when the
                 default provider was used because nothing matched.
    """
    provider: Provider
    matched: Optional[str] = None

    @property
    def fallback(self) -> bool:
        return self.matched is None


def route_model(model: str) -> Route:
    """
    Resolve the provider for a model id.

    Args:
        model (str): Model identifier, e.g. 'claude-sonnet-4-0' or 'gpt-4o'.

    Returns:
        Route: The matched provider, or DEFAULT_PROVIDER with ``fallback`` set.
    """
    name = (model or "").lower()
    for needle, provider in MODEL_ROUTES:
        if needle in name:
            return Route(provider, needle)
    return Route(DEFAULT_PROVIDER)


class UnifiedChatClient:
    """
    Unified client for sending OCR text to multiple LLM providers.

    This class provides a single interface for OpenAI, Claude (Anthropic),
    Gemini (Google) and DeepSeek, picking the provider from the model id.
    """

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
        deepseek_api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the UnifiedChatClient with API keys.

        Every provider is created even without a key; calls to it then fail
        with CREDENTIAL_MISSING instead of raising.

        Args:
            openai_api_key: API key for OpenAI. None reads OPENAI_API_KEY.
            anthropic_api_key: API key for Anthropic (Claude). None reads ANTHROPIC_API_KEY.
            gemini_api_key: API key for Google Gemini. None reads GEMINI_API_KEY / GOOGLE_API_KEY.
            deepseek_api_key: API key for DeepSeek. None reads DEEPSEEK_API_KEY.
            settings: Timeouts, token limit and base URLs. Defaults to Settings.from_env().
            http_client: Transport shared by all providers. Each provider
                         creates its own when omitted.
        """
        self.settings = settings or Settings.from_env()

        def key(provider: Provider, explicit: Optional[str]) -> str:
            return explicit if explicit is not None else credentials.resolve(provider)

        def base_url(provider: Provider) -> str:
            return self.settings.base_url(provider)

        common = {"timeout": self.settings.timeout, "http_client": http_client}

        self.providers: Dict[Provider, BaseLLMProvider] = {
            Provider.OPENAI: OpenAIProvider(
                key(Provider.OPENAI, openai_api_key),
                base_url=base_url(Provider.OPENAI),
                **common,
            ),
            Provider.ANTHROPIC: AnthropicProvider(
                key(Provider.ANTHROPIC, anthropic_api_key),
                base_url=base_url(Provider.ANTHROPIC),
                max_tokens=self.settings.max_tokens,
                **common,
            ),
            Provider.GEMINI: GeminiProvider(
                key(Provider.GEMINI, gemini_api_key),
                base_url=base_url(Provider.GEMINI),
                **common,
            ),
            Provider.DEEPSEEK: DeepSeekProvider(
                key(Provider.DEEPSEEK, deepseek_api_key),
                base_url=base_url(Provider.DEEPSEEK),
                **common,
            ),
        }

    async def aclose(self) -> None:
        for provider in self.providers.values():
            await provider.aclose()

    async def __aenter__(self) -> "UnifiedChatClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ==========================================================================
    # Routing
    # ==========================================================================

    @staticmethod
    def route(model: str) -> Route:
        return route_model(model)

    def provider_for(self, provider: Union[str, Provider]) -> BaseLLMProvider:
        """
        Look up a provider by name or alias ('claude' -> anthropic, 'google' -> gemini).

        Raises:
            ValueError: If the provider is not supported.
        """
        tag = credentials.normalize_provider(provider)
        if tag is None or tag not in self.providers:
            raise ValueError(f"Provider '{provider}' not configured or not supported.")
        return self.providers[tag]

    @staticmethod
    def list_models(provider: Union[str, Provider]) -> List[str]:
        """
        Get the known model ids for a provider.

        This is a static catalogue for model pickers; no request is made.

        Raises:
            ValueError: If the provider is not supported.
        """
        tag = credentials.normalize_provider(provider)
        if tag is None:
            raise ValueError(f"Unknown provider: {provider}. Use one of {[p.value for p in Provider]}")
        return list(AVAILABLE_MODELS[tag])

    # ==========================================================================
    # Unified Chat Methods
    # ==========================================================================

    async def complete(
        self,
        provider: Union[str, Provider],
        model: str,
        history: Iterable[ConversationTurn],
        system_instruction: Optional[str] = None,
        image: Optional[bytes] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatResult:
        """
        Call an explicitly named provider, bypassing model routing.

        Raises:
            ValueError: If the provider is not supported.
        """
        return await self.provider_for(provider).complete(
            model,
            history,
            system_instruction=system_instruction,
            image=image,
            max_tokens=max_tokens,
        )

    async def dispatch(
        self,
        model: str,
        prompt: str,
        system_instruction: Optional[str] = None,
        history: Iterable[ConversationTurn] = (),
        image: Optional[bytes] = None,
        include_image: bool = False,
        max_tokens: Optional[int] = None,
    ) -> ChatResult:
        """
        Send a prompt to whichever provider serves ``model``.

        The prompt (typically OCR output) is appended as a new user turn to a
        copy of ``history``; the caller's history is never modified. That turn
        is returned in ``meta['prompt_turn']`` so ``Conversation.apply`` can append
        the whole exchange on success.

        Args:
            model (str): Model identifier; selects the provider (see MODEL_ROUTES).
            prompt (str): Text for the new user turn. Skipped when empty.
            system_instruction (str, optional): High-level instruction for the model.
            history (Iterable[ConversationTurn]): Previous turns, oldest first.
            image (bytes, optional): Raw bytes of the source image.
            include_image (bool): Attach ``image`` to the request. Only the
                                  OpenAI-style provider sends it.
            max_tokens (int, optional): Maximum number of tokens to generate.

        Returns:
            ChatResult: Text or classified error. ``meta['route']`` names the
            provider used and ``meta['fallback']`` is True when the model id
            matched no provider and the default was used. The provider's
            own result is not modified.
        """
        route = self.route(model)
        if route.fallback:
            logger.warning(
                "No provider matches model %r; falling back to %s",
                model, route.provider.value,
            )

        turns = list(history)
        prompt_turn = None
        if prompt:
            prompt_turn = ConversationTurn(Role.USER, prompt)
            turns.append(prompt_turn)

        result = await self.providers[route.provider].complete(
            model,
            turns,
            system_instruction=system_instruction,
            image=image if include_image else None,
            max_tokens=max_tokens,
        )
        meta = dict(result.meta, route=route.provider.value, fallback=route.fallback)
        if prompt_turn is not None:
            meta["prompt_turn"] = prompt_turn
        return ChatResult(result.provider, text=result.text, error=result.error, meta=meta)
