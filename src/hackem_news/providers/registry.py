"""Provider registry for managing reasoning provider instances."""

from typing import Dict, List

from ..config import ProviderConfig
from ..logger import get_logger
from .anthropic_provider import AnthropicProvider
from .base import ReasoningProvider
from .exceptions import ProviderConfigError
from .openai_provider import OpenAIProvider


PROVIDER_TYPES = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


class ProviderRegistry:
    """Creates provider instances and orders them by priority."""

    def __init__(self, provider_configs: List[ProviderConfig]):
        """
        Initialize provider registry.

        Args:
            provider_configs: List of provider configurations

        Raises:
            ProviderConfigError: If a provider type is unknown
        """
        self.providers: Dict[str, ReasoningProvider] = {}
        self.logger = get_logger()
        self._initialize_providers(provider_configs)

        # Lower number = higher priority; ties keep config order
        enabled = [c for c in provider_configs if c.enabled]
        self.provider_order = [c.provider_id for c in sorted(enabled, key=lambda c: c.priority)]

    def _initialize_providers(self, configs: List[ProviderConfig]):
        for config in configs:
            if not config.enabled:
                self.logger.info(f"Skipping disabled provider: {config.provider_id}")
                continue

            provider_class = PROVIDER_TYPES.get(config.provider_type)
            if provider_class is None:
                raise ProviderConfigError(f"Unknown provider type: {config.provider_type}")

            self.providers[config.provider_id] = provider_class(config.provider_id, config)
            self.logger.info(
                f"Initialized provider: {config.provider_id} "
                f"({config.provider_type}, model: {config.model})"
            )

    def get_provider_chain(self) -> List[ReasoningProvider]:
        """Providers in the order they should be tried."""
        return [self.providers[provider_id] for provider_id in self.provider_order]
