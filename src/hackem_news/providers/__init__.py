"""Reasoning service abstraction layer."""

from .exceptions import ProviderAPIError, ProviderConfigError
from .metrics import ProviderMetrics
from .parsing import ParsedResponse, parse_json_response
from .base import ReasoningProvider
from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider
from .registry import ProviderRegistry
from .client import ReasoningClient

__all__ = [
    "ProviderAPIError",
    "ProviderConfigError",
    "ProviderMetrics",
    "ParsedResponse",
    "parse_json_response",
    "ReasoningProvider",
    "AnthropicProvider",
    "OpenAIProvider",
    "ProviderRegistry",
    "ReasoningClient",
]
