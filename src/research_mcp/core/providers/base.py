"""
Completion provider abstraction for research-mcp.

Provides a unified, model-agnostic interface for turning a system prompt and
a user prompt into generated text, with consistent error mapping and logging.

Example:
    from research_mcp.core.providers.base import CompletionProvider, CompletionResponse

    class MyProvider(CompletionProvider):
        name = "mine"

        async def _complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
            ...
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from research_mcp.core.errors.llm import (
    AuthenticationError,
    InvalidRequestError,
    LLMError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Token usage statistics.

    Attributes:
        prompt_tokens: Tokens in the input
        completion_tokens: Tokens in the output
        total_tokens: Total tokens used
    """

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class CompletionResponse:
    """Response from a completion call.

    Attributes:
        text: The generated text
        model: Model that generated the response
        usage: Token usage statistics
        raw_response: Original API response (for debugging)
    """

    text: str
    model: Optional[str] = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    raw_response: Optional[Dict[str, Any]] = None


class CompletionProvider(ABC):
    """Abstract base class for completion backends.

    Subclasses implement ``_complete``; callers use ``complete``, which adds
    request logging and timing around it.

    Attributes:
        name: Provider name (e.g., 'openai', 'anthropic')
        default_model: Model used when none is configured
    """

    name: str = "base"
    default_model: str = ""

    async def initialize(self) -> None:
        """Validate settings and acquire resources. Called once at startup."""

    async def close(self) -> None:
        """Release resources held by the provider."""

    async def complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        """Generate text for a system prompt and a user prompt.

        Raises:
            LLMError: On any backend failure (subclasses carry the specifics)
        """
        logger.debug(
            "Completion request to %s (system=%d chars, user=%d chars)",
            self.name,
            len(system_prompt),
            len(user_prompt),
        )
        start = time.perf_counter()
        try:
            response = await self._complete(system_prompt, user_prompt)
        except LLMError as exc:
            logger.error(
                "Completion via %s failed after %.0fms: %s",
                self.name,
                (time.perf_counter() - start) * 1000,
                exc,
            )
            raise
        logger.info(
            "Completion via %s (%s) returned %d chars in %.0fms",
            self.name,
            response.model,
            len(response.text),
            (time.perf_counter() - start) * 1000,
        )
        return response

    @abstractmethod
    async def _complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        """Backend-specific completion call."""


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] if response.text else "Unknown error"
    error_field = data.get("error") if isinstance(data, dict) else None
    if isinstance(error_field, dict):
        return str(error_field.get("message", error_field))
    if isinstance(error_field, str):
        return error_field
    return response.text[:200]


def raise_for_status(response: httpx.Response, provider: str) -> None:
    """Map an HTTP error response to the LLMError hierarchy.

    Raises:
        AuthenticationError: On 401/403
        RateLimitError: On 429
        InvalidRequestError: On other 4xx
        LLMError: On 5xx (retryable)
    """
    status = response.status_code
    if status < 400:
        return
    detail = _error_detail(response)
    if status in (401, 403):
        raise AuthenticationError(f"{provider} rejected credentials: {detail}", provider=provider)
    if status == 429:
        retry_after: Optional[float] = None
        header = response.headers.get("Retry-After")
        if header:
            try:
                retry_after = float(header)
            except ValueError:
                pass
        raise RateLimitError(provider=provider, retry_after=retry_after)
    if status < 500:
        raise InvalidRequestError(
            f"{provider} API error {status}: {detail}",
            provider=provider,
            status_code=status,
        )
    raise LLMError(
        f"{provider} API error {status}: {detail}",
        provider=provider,
        retryable=True,
        status_code=status,
    )
