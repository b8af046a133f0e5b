"""
Base class and errors for AI text-completion providers.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import aiohttp

from ..models import ProviderResponse

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base exception for provider-related errors."""
    pass


class AuthenticationError(ProviderError):
    """API key rejected by the vendor."""
    pass


class RateLimitError(ProviderError):
    """API rate limit exceeded."""
    pass


class ResponseFormatError(ProviderError):
    """Vendor answered with an unexpected body."""
    pass


class AIProvider(ABC):
    """
    Abstract base class that every vendor integration implements.

    Subclasses only implement ``_complete``. ``get_response`` wraps it so
    that callers always get a ``ProviderResponse`` back and never a raw
    exception. Calls are not retried.
    """

    vendor: str = "unknown"

    def __init__(
        self,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: int = 150,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session owned by this provider."""
        if self._session is None or self._session.closed:
            if self.timeout is not None:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                )
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _post_json(self, headers: dict, payload: dict) -> dict:
        """POST ``payload`` to the endpoint and return the decoded JSON body."""
        session = await self._get_session()
        async with session.post(self.endpoint, headers=headers, json=payload) as response:
            if response.status in (401, 403):
                raise AuthenticationError(f"API key rejected ({response.status})")
            if response.status == 429:
                raise RateLimitError("API rate limit exceeded")
            if not 200 <= response.status < 300:
                body = (await response.read()).decode("utf-8", errors="replace")
                raise ProviderError(f"API error ({response.status}): {body[:500]}")
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise ResponseFormatError(f"Response is not JSON: {e}") from e

    @abstractmethod
    async def _complete(self, prompt: str) -> str:
        """
        Send ``prompt`` to the vendor and return the raw completion text.

        May raise ProviderError, aiohttp.ClientError or asyncio.TimeoutError.
        """
        pass

    async def get_response(self, prompt: str) -> ProviderResponse:
        """
        Ask the vendor for a completion.

        Args:
            prompt: Non-empty user question

        Returns:
            ProviderResponse with the answer text, or with an error detail
            when the call failed or produced nothing
        """
        try:
            text = await self._complete(prompt)
        except ProviderError as e:
            logger.error(f"{self.vendor} provider error: {e}")
            return ProviderResponse.failure(self.vendor, str(e))
        except asyncio.TimeoutError:
            logger.error(f"{self.vendor} request timed out")
            return ProviderResponse.failure(self.vendor, "Request timed out")
        except aiohttp.ClientError as e:
            logger.error(f"{self.vendor} request failed: {e}")
            return ProviderResponse.failure(self.vendor, f"Request failed: {e}")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"{self.vendor} returned an unexpected response: {e!r}")
            return ProviderResponse.failure(self.vendor, f"Unexpected response: {e!r}")

        if text is not None and not isinstance(text, str):
            logger.error(f"{self.vendor} returned a non-text completion: {text!r}")
            return ProviderResponse.failure(self.vendor, f"Unexpected response: {text!r}")

        text = (text or "").strip()
        if not text:
            logger.warning(f"{self.vendor} returned an empty completion")
            return ProviderResponse.failure(self.vendor, "Empty completion")

        return ProviderResponse.success(self.vendor, text)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(endpoint={self.endpoint!r}, model={self.model!r})"
