"""OpenAI-compatible chat completions backend.

Works against any server exposing ``POST {base_url}/chat/completions`` with
bearer authentication (OpenAI, Azure-style gateways, OpenRouter, vLLM, ...).
"""

import logging
from typing import Any, Optional

import httpx

from research_mcp.core.errors.llm import LLMError, ProviderNotConfiguredError
from research_mcp.core.providers.base import (
    CompletionProvider,
    CompletionResponse,
    TokenUsage,
    raise_for_status,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_TIMEOUT = 120.0


def _message_text(content: Any) -> str:
    # Some gateways return content as a list of typed parts
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
            elif isinstance(part, str):
                parts.append(part)
        return "\n".join(parts)
    return "" if content is None else str(content)


class OpenAICompatibleProvider(CompletionProvider):
    """Chat completions over httpx.

    Example:
        provider = OpenAICompatibleProvider(api_key="sk-...", model="gpt-4o")
        await provider.initialize()
        response = await provider.complete("You are terse.", "Say hi")
    """

    name = "openai"
    default_model = DEFAULT_MODEL

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: Optional[str] = None,
        max_tokens: int = 4096,
        timeout: float = DEFAULT_TIMEOUT,
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
                "LLM_API_KEY is required for the OpenAI-compatible backend",
                provider=self.name,
            )
        logger.info("OpenAI-compatible provider ready (base_url=%s, model=%s)", self._base_url, self._model)

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
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = await self._get_client().post(
                f"{self._base_url}/chat/completions",
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

        choices = data.get("choices") or []
        if not choices:
            raise LLMError("API returned no choices", provider=self.name)
        message = choices[0].get("message") or {}

        usage_data = data.get("usage") or {}
        usage = TokenUsage(
            prompt_tokens=int(usage_data.get("prompt_tokens", 0)),
            completion_tokens=int(usage_data.get("completion_tokens", 0)),
            total_tokens=int(usage_data.get("total_tokens", 0)),
        )
        return CompletionResponse(
            text=_message_text(message.get("content")),
            model=data.get("model", self._model),
            usage=usage,
            raw_response=data,
        )
