"""Reasoning service client with provider fallback."""

from typing import List

from ..logger import get_logger
from .base import ReasoningProvider
from .exceptions import ProviderAPIError
from .parsing import ParsedResponse, parse_json_response
from .registry import ProviderRegistry


class ReasoningClient:
    """Sends prompts to the reasoning service, trying providers in priority order."""

    def __init__(self, registry: ProviderRegistry):
        self.registry = registry
        self.logger = get_logger()

    @property
    def providers(self) -> List[ReasoningProvider]:
        return self.registry.get_provider_chain()

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 1500,
        temperature: float = 0.3
    ) -> ParsedResponse:
        """
        Request a JSON object. Never raises.

        A provider whose call fails or whose output does not parse is skipped
        in favour of the next one; the last failure reason is returned when
        every provider fails.
        """
        last_error = "no reasoning provider available"

        for provider in self.providers:
            try:
                raw = await provider.complete(
                    system_prompt,
                    user_prompt,
                    json_mode=True,
                    max_tokens=max_tokens,
                    temperature=temperature
                )
            except ProviderAPIError as e:
                self.logger.warning(f"Provider {provider.provider_id} failed: {e}")
                last_error = str(e)
                continue

            parsed = parse_json_response(raw)
            if parsed.ok:
                return parsed

            self.logger.warning(
                f"Provider {provider.provider_id} returned unusable output ({parsed.error}): "
                f"{raw[:200]!r}"
            )
            last_error = parsed.error

        return ParsedResponse(error=last_error)

    async def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 150,
        temperature: float = 0.5
    ) -> str:
        """
        Request free text.

        Raises:
            ProviderAPIError: If every provider fails or returns nothing
        """
        last_error = "no reasoning provider available"

        for provider in self.providers:
            try:
                text = await provider.complete(
                    system_prompt,
                    user_prompt,
                    json_mode=False,
                    max_tokens=max_tokens,
                    temperature=temperature
                )
            except ProviderAPIError as e:
                self.logger.warning(f"Provider {provider.provider_id} failed: {e}")
                last_error = str(e)
                continue

            if text and text.strip():
                return text.strip()

            last_error = f"{provider.provider_id} returned an empty response"
            self.logger.warning(last_error)

        raise ProviderAPIError(last_error)

    def log_usage_summary(self):
        """Log provider usage statistics."""
        self.logger.info("Provider usage summary:")
        for provider in self.providers:
            stats = provider.get_usage_stats()
            self.logger.info(
                f"  {provider.provider_id}: {stats['successful_requests']}/{stats['total_requests']} successful, "
                f"{stats['retried_requests']} retries, "
                f"{stats['total_input_tokens']} input tokens, {stats['total_output_tokens']} output tokens, "
                f"{stats['average_latency_seconds']:.2f}s avg latency"
            )
