"""
Interchangeable AI text-completion providers.
"""

from .base import (
    AIProvider,
    ProviderError,
    AuthenticationError,
    RateLimitError,
    ResponseFormatError,
)
from .openai_client import OpenAIProvider
from .anthropic_client import AnthropicProvider
from .echo import EchoProvider

__all__ = [
    'AIProvider',
    'ProviderError',
    'AuthenticationError',
    'RateLimitError',
    'ResponseFormatError',
    'OpenAIProvider',
    'AnthropicProvider',
    'EchoProvider',
]
