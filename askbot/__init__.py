"""
Slack AI bot.

Routes Slack commands, events and actions to handlers that forward
questions to interchangeable AI providers.
"""

from .models import (
    RequestKind,
    RequestState,
    MessageResult,
    InboundRequest,
    HandlerResponse,
    ProviderResponse,
)
from .storage import StateStore, LoadResult
from .config import Settings, ConfigurationError, load_settings
from .registry import ProviderRegistry, UnknownProviderError, build_registry
from .dispatcher import Dispatcher
from .handlers import AskBotHandlers

__all__ = [
    'RequestKind',
    'RequestState',
    'MessageResult',
    'InboundRequest',
    'HandlerResponse',
    'ProviderResponse',
    'StateStore',
    'LoadResult',
    'Settings',
    'ConfigurationError',
    'load_settings',
    'ProviderRegistry',
    'UnknownProviderError',
    'build_registry',
    'Dispatcher',
    'AskBotHandlers',
]
