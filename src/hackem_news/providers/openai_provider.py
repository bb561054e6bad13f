"""OpenAI API provider implementation."""

from typing import Tuple

from openai import AsyncOpenAI
from openai import APIConnectionError, RateLimitError

from ..config import ProviderConfig
from .base import ReasoningProvider


class OpenAIProvider(ReasoningProvider):
    """OpenAI chat completions provider (supports OpenAI-compatible endpoints)."""

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
        request = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": self.timeout
        }
        if json_mode:
            request["response_format"] = {"type": "json_object"}

        # One client per call: each API request may run on its own event loop
        async with AsyncOpenAI(**self.client_kwargs) as client:
            response = await client.chat.completions.create(**request)

        text = response.choices[0].message.content or ""
        usage = response.usage
        input_tokens = usage.prompt_tokens if usage else 0
        output_tokens = usage.completion_tokens if usage else 0
        return text, input_tokens, output_tokens

    def _is_retryable(self, error: Exception) -> bool:
        # APITimeoutError is a subclass of APIConnectionError
        return isinstance(error, (RateLimitError, APIConnectionError))
