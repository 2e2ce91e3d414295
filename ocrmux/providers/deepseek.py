from typing import Optional

from .openai import OpenAIProvider
from ..config import BASE_URLS
from ..types import Provider


class DeepSeekProvider(OpenAIProvider):
    """
    Provider for the DeepSeek API (OpenAI-compatible, text only).
    """

    display_name = "DeepSeek"
    supports_images = False

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(
            api_key=api_key,
            base_url=base_url or BASE_URLS[Provider.DEEPSEEK],
            provider_name=Provider.DEEPSEEK.value,
            **kwargs,
        )
