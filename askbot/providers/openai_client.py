"""
OpenAI completions API provider.
"""

import logging

from .base import AIProvider, ResponseFormatError

logger = logging.getLogger(__name__)

OPENAI_API_URL = "https://api.openai.com/v1/completions"
DEFAULT_MODEL = "gpt-3.5-turbo-instruct"
DEFAULT_MAX_TOKENS = 150


class OpenAIProvider(AIProvider):
    """Sends prompts to the legacy completions endpoint with bearer auth."""

    vendor = "openai"

    def __init__(self, api_key: str, model: str | None = None,
                 max_tokens: int | None = None, endpoint: str | None = None,
                 timeout: float | None = None):
        super().__init__(
            api_key=api_key,
            endpoint=endpoint or OPENAI_API_URL,
            model=model or DEFAULT_MODEL,
            max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
            timeout=timeout,
        )

    async def _complete(self, prompt: str) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "prompt": prompt,
            "max_tokens": self.max_tokens,
        }

        logger.debug(f"Sending completion request to {self.endpoint} ({self.model})")
        data = await self._post_json(headers, payload)

        choices = data.get("choices")
        if not choices:
            raise ResponseFormatError("No choices in response")
        return choices[0]["text"]
