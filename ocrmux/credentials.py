"""API key lookup for each provider."""

import os
from typing import Optional, Union

import dotenv

from .config import ENV_KEYS
from .types import Provider

ALIASES = {
    "claude": Provider.ANTHROPIC,
    "google": Provider.GEMINI,
}


def normalize_provider(provider_id: Union[str, Provider]) -> Optional[Provider]:
    """
    Map a provider name or alias ('claude', 'google') to a Provider.

    Returns None for unknown names.
    """
    if isinstance(provider_id, Provider):
        return provider_id
    name = (provider_id or "").strip().lower()
    if name in ALIASES:
        return ALIASES[name]
    try:
        return Provider(name)
    except ValueError:
        return None


def resolve(provider_id: Union[str, Provider], dotenv_path: Optional[str] = None) -> str:
    """
    Resolve the API key for a provider.

    Each environment variable registered for the provider is looked up in
    the process environment first, then in the .env file. This never raises:
    a missing key (or unknown provider) yields an empty string, and the
    provider reports CREDENTIAL_MISSING when it's asked to make a call.

    Args:
        provider_id: Provider name, alias or Provider member.
        dotenv_path: Explicit .env path. Defaults to searching upwards from
                     the current working directory.

    Returns:
        str: The API key, or "" if none is configured.
    """
    provider = normalize_provider(provider_id)
    if provider is None:
        return ""

    names = ENV_KEYS[provider]
    for name in names:
        value = os.environ.get(name)
        if value:
            return value

    path = dotenv_path if dotenv_path is not None else dotenv.find_dotenv(usecwd=True)
    if path and os.path.isfile(path):
        for name in names:
            value = dotenv.get_key(path, name)
            if value:
                return value
    return ""
