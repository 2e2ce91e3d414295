"""Configuration loading from environment variables and the .env file."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import dotenv

from .types import Provider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 45.0
DEFAULT_MAX_TOKENS = 4096
ANTHROPIC_VERSION = "2023-06-01"

BASE_URLS: Dict[Provider, str] = {
    Provider.OPENAI: "https://api.openai.com/v1",
    Provider.ANTHROPIC: "https://api.anthropic.com/v1",
    Provider.GEMINI: "https://generativelanguage.googleapis.com/v1beta",
    Provider.DEEPSEEK: "https://api.deepseek.com",
}

# Checked in order; the first variable that is set wins.
ENV_KEYS: Dict[Provider, tuple] = {
    Provider.OPENAI: ("OPENAI_API_KEY",),
    Provider.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    Provider.GEMINI: ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    Provider.DEEPSEEK: ("DEEPSEEK_API_KEY",),
}

# Known model ids per provider, for model pickers. Not exhaustive.
AVAILABLE_MODELS: Dict[Provider, List[str]] = {
    Provider.OPENAI: ["gpt-4o", "gpt-4o-mini", "gpt-4.1"],
    Provider.ANTHROPIC: ["claude-opus-4-0", "claude-sonnet-4-0", "claude-3-5-haiku-latest"],
    Provider.GEMINI: ["gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.0-flash"],
    Provider.DEEPSEEK: ["deepseek-chat", "deepseek-reasoner"],
}


def _env_float(env: Mapping[str, Optional[str]], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


def _env_int(env: Mapping[str, Optional[str]], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


@dataclass
class Settings:
    timeout: float = DEFAULT_TIMEOUT
    max_tokens: int = DEFAULT_MAX_TOKENS
    base_urls: Dict[Provider, str] = field(default_factory=lambda: dict(BASE_URLS))
    log_level: str = "WARNING"

    def base_url(self, provider: Provider) -> str:
        return self.base_urls.get(provider, BASE_URLS[provider])

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """
        Build settings from OCRMUX_* environment variables.

        Values from a .env file are used for variables that are not set in
        the process environment. The file is read, not loaded: os.environ is
        left untouched.

        Args:
            dotenv_path: Explicit .env path. Defaults to searching upwards
                         from the current working directory.

        Returns:
            Settings: The resolved configuration.
        """
        path = dotenv_path or dotenv.find_dotenv(usecwd=True)
        env: Dict[str, Optional[str]] = dict(dotenv.dotenv_values(path)) if path else {}
        env.update(os.environ)

        base_urls = dict(BASE_URLS)
        for provider in Provider:
            override = env.get(f"OCRMUX_{provider.name}_BASE_URL")
            if override:
                base_urls[provider] = override.rstrip("/")

        return cls(
            timeout=_env_float(env, "OCRMUX_TIMEOUT", DEFAULT_TIMEOUT),
            max_tokens=_env_int(env, "OCRMUX_MAX_TOKENS", DEFAULT_MAX_TOKENS),
            base_urls=base_urls,
            log_level=(env.get("OCRMUX_LOG_LEVEL") or "WARNING").upper(),
        )
