from typing import Any

from .base import CompletionClient
from .providers import OpenAICompatibleClient
from .providers.openai_compatible import DEEPSEEK_BASE_URL, OPENROUTER_BASE_URL


def create_completion_client(provider: str, **config: Any) -> CompletionClient:
    """Create a completion client.

    This factory function hides the endpoint presets for different providers.
    A missing ``api_key`` is not an error here: the client reports
    MISSING_CREDENTIAL on every request instead, without touching the network.

    Args:
        provider: Provider preset ('openrouter', 'openai', 'deepseek')
        **config: Client configuration
            - api_key: str | None
            - model: str (default model when the context does not name one)
            - base_url: str | None (overrides the preset)
            - referer: str | None (OpenRouter attribution header)

    Returns:
        Initialized completion client

    Raises:
        ValueError: If provider type is not supported

    Examples:
        >>> client = create_completion_client(
        ...     "openrouter",
        ...     api_key="sk-or-...",
        ... )
    """
    provider_lower = provider.lower()

    if provider_lower == "openrouter":
        config.setdefault("base_url", OPENROUTER_BASE_URL)
        return OpenAICompatibleClient(**config)

    if provider_lower == "openai":
        config.setdefault("base_url", None)
        config.setdefault("model", "gpt-4o-mini")
        return OpenAICompatibleClient(**config)

    if provider_lower == "deepseek":
        config.setdefault("base_url", DEEPSEEK_BASE_URL)
        config.setdefault("model", "deepseek-chat")
        return OpenAICompatibleClient(**config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'openrouter', 'openai', 'deepseek'"
    )
