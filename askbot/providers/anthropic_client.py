"""
Anthropic Messages API provider.
"""

import logging

from .base import AIProvider, ResponseFormatError

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-3-haiku-20240307"
DEFAULT_MAX_TOKENS = 150


class AnthropicProvider(AIProvider):
    """Sends the prompt as a single user message."""

    vendor = "anthropic"

    def __init__(self, api_key: str, model: str | None = None,
                 max_tokens: int | None = None, endpoint: str | None = None,
                 timeout: float | None = None):
        super().__init__(
            api_key=api_key,
            endpoint=endpoint or ANTHROPIC_API_URL,
            model=model or DEFAULT_MODEL,
            max_tokens=max_tokens or DEFAULT_MAX_TOKENS,
            timeout=timeout,
        )

    async def _complete(self, prompt: str) -> str:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        logger.debug(f"Sending messages request to {self.endpoint} ({self.model})")
        data = await self._post_json(headers, payload)

        blocks = data.get("content")
        if not isinstance(blocks, list):
            raise ResponseFormatError("No content blocks in response")
        return "".join(
            block["text"] for block in blocks if block.get("type") == "text"
        )
