"""Resilient Image Client — wraps AsyncOpenAI image generation with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection): max_retries retries with exponential backoff
    - Timeouts and client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to ImageGenerationError (core/errors.py)
    - Returns raw PNG bytes decoded from the b64_json payload

Design Decisions:
    - Wrapper over raw client: routes and services never see SDK exceptions
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
"""

import asyncio
import base64
import binascii
import logging
import random

import openai
from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    InternalServerError,
    RateLimitError,
)

from aixchange.core.errors import ErrorContext, ImageGenerationError

logger = logging.getLogger(__name__)


class ResilientImageClient:
    """Generates images through the OpenAI Images API with retries."""

    def __init__(
        self,
        api_key: str,
        model: str = "dall-e-3",
        size: str = "1024x1024",
        quality: str = "standard",
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        max_delay_ms: int = 30_000,
        timeout_seconds: int = 120,
        client=None,
    ):
        # SDK-level retries disabled: this wrapper owns the retry policy
        self.client = client or openai.AsyncOpenAI(
            api_key=api_key, timeout=timeout_seconds, max_retries=0,
        )
        self.model = model
        self.size = size
        self.quality = quality
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def generate_png(
        self, prompt: str, context: ErrorContext | None = None,
    ) -> bytes:
        """Generate one image for prompt and return its decoded bytes."""
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.images.generate(
                    model=self.model,
                    prompt=prompt,
                    n=1,
                    size=self.size,
                    quality=self.quality,
                    response_format="b64_json",
                )
                logger.info("Image API success", extra={"attempt": attempt + 1})
                return self._decode(response, context)

            except RateLimitError as e:
                await self._handle_rate_limit(e, attempt, context)

            except APITimeoutError:
                raise ImageGenerationError(
                    "API timeout", "timeout", context=context,
                )

            except (APIConnectionError, InternalServerError) as e:
                await self._handle_transient_error(e, attempt, context)

            except APIError as e:
                raise ImageGenerationError(
                    str(e), "client_error", context=context,
                )

        raise ImageGenerationError(
            "Retries exhausted", "connection_error", context=context,
        )

    def _decode(self, response, context: ErrorContext | None) -> bytes:
        data = getattr(response, "data", None) or []
        b64 = getattr(data[0], "b64_json", None) if data else None
        if not b64:
            raise ImageGenerationError(
                "API did not return image data", "empty_response", context=context,
            )
        try:
            return base64.b64decode(b64)
        except (binascii.Error, ValueError) as e:
            raise ImageGenerationError(
                f"Undecodable image payload: {e}", "empty_response", context=context,
            )

    async def _handle_rate_limit(
        self, e: RateLimitError, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle rate limit error with retry or raise."""
        retry_after_ms = self._extract_retry_after(e)
        if attempt >= self.max_retries:
            raise ImageGenerationError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Image API rate limit hit, retry after {delay}ms",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise ImageGenerationError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Image API transient error, retry after {delay}ms: {e}",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        response = getattr(error, "response", None)
        if response is None:
            return None
        val = response.headers.get("retry-after")
        if not val:
            return None
        try:
            return int(float(val) * 1000)
        except ValueError:
            return None
