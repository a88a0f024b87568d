"""Anthropic Messages API backend."""

import logging
from typing import Optional

import httpx

from research_mcp.core.errors.llm import LLMError, ProviderNotConfiguredError
from research_mcp.core.providers.base import (
    CompletionProvider,
    CompletionResponse,
    TokenUsage,
    raise_for_status,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_MODEL = "claude-sonnet-4-5"
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(CompletionProvider):
    """Messages API over httpx. The system prompt goes in the top-level ``system`` field."""

    name = "anthropic"
    default_model = DEFAULT_MODEL

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key or ""
        self._base_url = base_url.rstrip("/")
        self._model = model or self.default_model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        if not self._api_key:
            raise ProviderNotConfiguredError(
                "LLM_API_KEY is required for the Anthropic backend",
                provider=self.name,
            )
        logger.info("Anthropic provider ready (model=%s)", self._model)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        try:
            response = await self._get_client().post(
                f"{self._base_url}/messages",
                headers=headers,
                json=payload,
            )
        except httpx.TimeoutException as exc:
            raise LLMError(
                f"Request timed out after {self._timeout}s",
                provider=self.name,
                retryable=True,
            ) from exc
        except httpx.HTTPError as exc:
            raise LLMError(f"Request failed: {exc}", provider=self.name, retryable=True) from exc

        raise_for_status(response, self.name)
        data = response.json()

        blocks = data.get("content") or []
        text = "".join(
            str(block.get("text", ""))
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )
        usage_data = data.get("usage") or {}
        prompt_tokens = int(usage_data.get("input_tokens", 0))
        completion_tokens = int(usage_data.get("output_tokens", 0))
        return CompletionResponse(
            text=text,
            model=data.get("model", self._model),
            usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            raw_response=data,
        )
