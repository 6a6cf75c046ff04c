"""
Vision Provider Implementations

Pluggable remote vision endpoints following a common interface.
Supports OpenAI (default) and Anthropic Claude.
"""

from typing import Optional

from ..errors import ConfigurationError
from ..models import Config
from .base import VisionPrompt, VisionProvider, build_prompt, media_type_for
from .anthropic import AnthropicProvider
from .openai import OpenAIProvider

__all__ = [
    "VisionPrompt",
    "VisionProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "build_prompt",
    "get_provider",
    "media_type_for",
]

PROVIDER_NAMES = ("openai", "anthropic")


def get_provider(
    provider_name: str,
    config: Config,
    api_key: Optional[str] = None,
    model: Optional[str] = None
) -> VisionProvider:
    """
    Factory function to get a configured vision provider.

    Args:
        provider_name: One of "openai" or "anthropic"
        config: Configuration object with API keys and model override
        api_key: Resolved credential; falls back to the configured key
        model: Model override; falls back to config, then provider default

    Returns:
        Configured vision provider instance

    Raises:
        ConfigurationError: If provider name is unknown or has no API key

    Example:
        provider = get_provider("openai", config, api_key=key)
    """
    if provider_name not in PROVIDER_NAMES:
        raise ConfigurationError(
            f"Unknown provider: {provider_name}. "
            f"Choose from: {', '.join(PROVIDER_NAMES)}"
        )

    key = api_key or config.api_key_for(provider_name)
    if not key:
        env_name = f"{provider_name.upper()}_API_KEY"
        raise ConfigurationError(
            f"{provider_name} API key not configured.",
            hint=f"Set {env_name} in the environment or .env file, or pass --api-key."
        )

    model = model or config.vision_model
    kwargs = {"model": model} if model else {}

    if provider_name == "anthropic":
        return AnthropicProvider(api_key=key, **kwargs)
    return OpenAIProvider(api_key=key, **kwargs)
