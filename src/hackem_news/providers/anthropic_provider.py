"""Anthropic Claude API provider implementation."""

from typing import Tuple

from anthropic import AsyncAnthropic
from anthropic import APIConnectionError, RateLimitError

from ..config import ProviderConfig
from .base import ReasoningProvider


JSON_ONLY_SUFFIX = "\n\nRespond with a single JSON object and nothing else."


class AnthropicProvider(ReasoningProvider):
    """Anthropic Claude messages provider."""

    def __init__(self, provider_id: str, config: ProviderConfig):
        super().__init__(provider_id, config)
        self.client_kwargs = {"api_key": config.api_key, "max_retries": 0}
        if config.base_url:
            self.client_kwargs["base_url"] = config.base_url

    async def _create_completion(
        self,
        system_prompt: str,
        user_prompt: str,
        json_mode: bool,
        max_tokens: int,
        temperature: float
    ) -> Tuple[str, int, int]:
        # No native JSON mode; the instruction goes into the system prompt
        if json_mode:
            system_prompt = system_prompt + JSON_ONLY_SUFFIX

        async with AsyncAnthropic(**self.client_kwargs) as client:
            response = await client.messages.create(
                model=self.model,
                system=system_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": user_prompt}],
                timeout=self.timeout
            )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return text, response.usage.input_tokens, response.usage.output_tokens

    def _is_retryable(self, error: Exception) -> bool:
        return isinstance(error, (RateLimitError, APIConnectionError))
