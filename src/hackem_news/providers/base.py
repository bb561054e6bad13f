"""Abstract base class for reasoning service providers."""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Tuple

from ..config import ProviderConfig
from ..logger import get_logger
from .exceptions import ProviderAPIError
from .metrics import ProviderMetrics


class ReasoningProvider(ABC):
    """Abstract base class for chat-completion style reasoning services."""

    def __init__(self, provider_id: str, config: ProviderConfig):
        """
        Initialize provider.

        Args:
            provider_id: Unique identifier for this provider instance
            config: Provider configuration
        """
        self.provider_id = provider_id
        self.config = config
        self.model = config.model
        self.timeout = config.timeout
        self.retries = max(0, config.retries)
        self.metrics = ProviderMetrics(provider_id)
        self.logger = get_logger()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool = False,
        max_tokens: int = 1500,
        temperature: float = None
    ) -> str:
        """
        Run one completion, retrying transient failures with exponential backoff.

        Args:
            system_prompt: Instructions plus audience description
            user_prompt: Task payload
            json_mode: Ask the service for a JSON object response
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature (defaults to the provider's)

        Returns:
            Raw response text

        Raises:
            ProviderAPIError: If the call fails after all retries
        """
        if temperature is None:
            temperature = self.config.temperature

        start_time = time.time()
        attempts = self.retries + 1

        for attempt in range(attempts):
            try:
                text, input_tokens, output_tokens = await self._create_completion(
                    system_prompt, user_prompt, json_mode, max_tokens, temperature
                )
                self.metrics.record_success(time.time() - start_time, input_tokens, output_tokens)
                return text

            except Exception as e:
                if self._is_retryable(e) and attempt < attempts - 1:
                    wait_time = 2 ** attempt  # 1s, 2s, 4s
                    self.metrics.record_retry()
                    self.logger.warning(
                        f"{self.provider_id}: transient error on attempt "
                        f"{attempt + 1}/{attempts}, retrying in {wait_time}s: {e}"
                    )
                    await asyncio.sleep(wait_time)
                    continue

                self.metrics.record_failure(str(e))
                raise ProviderAPIError(f"{self.provider_id} call failed: {e}") from e

        raise ProviderAPIError(f"{self.provider_id}: failed after maximum retries")

    @abstractmethod
    async def _create_completion(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool,
        max_tokens: int,
        temperature: float
    ) -> Tuple[str, int, int]:
        """
        Issue a single API call.

        Returns:
            Tuple of (text, input_tokens, output_tokens)
        """
        pass

    @abstractmethod
    def _is_retryable(self, error: Exception) -> bool:
        """Whether the error is a rate limit or connection problem."""
        pass

    def get_usage_stats(self) -> dict:
        return self.metrics.to_dict()
