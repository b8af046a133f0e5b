"""
Registry of named AI providers, built once at startup.
"""

import logging

from .config import Settings, ConfigurationError
from .providers import AIProvider, OpenAIProvider, AnthropicProvider, EchoProvider

logger = logging.getLogger(__name__)

PRIMARY = "primary"
SECONDARY = "secondary"


class UnknownProviderError(KeyError):
    """Lookup of a provider name that was never registered."""
    pass


class ProviderRegistry:
    """Maps logical names to provider instances."""

    def __init__(self):
        self._providers: dict[str, AIProvider] = {}

    def register(self, name: str, provider: AIProvider) -> None:
        """Register a provider under ``name``. Names are unique."""
        if name in self._providers:
            raise ValueError(f"Provider '{name}' is already registered")
        self._providers[name] = provider
        logger.info(f"Registered provider: {name} -> {provider.vendor}")

    def get(self, name: str) -> AIProvider:
        """Get a provider by name."""
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownProviderError(name) from None

    def names(self) -> list[str]:
        """Get list of registered provider names."""
        return list(self._providers)

    def require(self, *names: str) -> None:
        """
        Check that every name is registered.

        Raises:
            ConfigurationError: If any name is missing
        """
        missing = [name for name in names if name not in self._providers]
        if missing:
            available = ", ".join(self._providers) or "none"
            raise ConfigurationError(
                f"Unknown provider(s): {', '.join(missing)} (available: {available})"
            )

    async def close(self) -> None:
        """Close every provider's HTTP session."""
        for name, provider in self._providers.items():
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"Failed to close provider '{name}': {e}")

    def __contains__(self, name: object) -> bool:
        return name in self._providers


def build_registry(settings: Settings) -> ProviderRegistry:
    """
    Build the provider registry from configured credentials.

    ``primary`` is OpenAI when a key is set. ``secondary`` is Anthropic when
    a key is set, otherwise an offline echo provider.

    Raises:
        ConfigurationError: If the default provider is not available
    """
    registry = ProviderRegistry()

    if settings.openai_api_key:
        registry.register(PRIMARY, OpenAIProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_tokens=settings.openai_max_tokens,
            timeout=settings.request_timeout,
        ))
    else:
        logger.warning("OPENAI_API_KEY not set - primary provider disabled")

    if settings.anthropic_api_key:
        registry.register(SECONDARY, AnthropicProvider(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            timeout=settings.request_timeout,
        ))
    else:
        logger.warning("ANTHROPIC_API_KEY not set - secondary provider runs offline")
        registry.register(SECONDARY, EchoProvider(label="Anthropic"))

    registry.require(settings.default_provider)
    return registry
