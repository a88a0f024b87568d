"""Tavily search provider for web search.

Wraps the Tavily Search API. Error handling:
    - 401: AuthenticationError, not retryable
    - 429: RateLimitError, retryable (honors Retry-After)
    - 5xx: SearchProviderError, retryable
    - other 4xx: SearchProviderError, not retryable

Example usage:
    provider = TavilySearchProvider(api_key="tvly-...")
    results = await provider.search("grid-scale battery storage", max_results=5)
"""

import logging
import os
from typing import Any, Optional

import httpx

from research_mcp.core.errors.search import (
    AuthenticationError,
    RateLimitError,
    SearchProviderError,
)
from research_mcp.core.research.providers.base import SearchProvider, SearchResult
from research_mcp.core.research.providers.shared import (
    extract_error_message,
    parse_retry_after,
)

logger = logging.getLogger(__name__)

TAVILY_API_BASE_URL = "https://api.tavily.com"
TAVILY_SEARCH_ENDPOINT = "/search"
DEFAULT_TIMEOUT = 30.0


class TavilySearchProvider(SearchProvider):
    """Tavily Search API provider.

    Attributes:
        api_key: Tavily API key (required)
        base_url: API base URL (default: https://api.tavily.com)
        timeout: Request timeout in seconds (default: 30.0)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = TAVILY_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        search_depth: str = "basic",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Tavily search provider.

        Args:
            api_key: Tavily API key. If not provided, reads from TAVILY_API_KEY env var.
            base_url: API base URL
            timeout: Request timeout in seconds
            search_depth: Tavily search depth ("basic" or "advanced")
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If no API key is provided or found in environment
        """
        self._api_key = api_key or os.environ.get("TAVILY_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Tavily API key required. Provide via api_key parameter "
                "or TAVILY_API_KEY environment variable."
            )
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._search_depth = search_depth
        self._transport = transport

    def get_provider_name(self) -> str:
        return "tavily"

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        payload: dict[str, Any] = {
            "api_key": self._api_key,
            "query": query,
            "max_results": max_results,
            "search_depth": self._search_depth,
            "include_answer": False,
            "include_raw_content": False,
        }
        data = await self._execute(payload)
        results = self._parse_response(data)
        logger.debug("Tavily returned %d results for %r", len(results), query)
        return results[:max_results]

    async def _execute(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Execute the API request.

        Raises:
            AuthenticationError: If API key is invalid
            RateLimitError: If rate limit exceeded
            SearchProviderError: For other API or transport errors
        """
        url = f"{self._base_url}{TAVILY_SEARCH_ENDPOINT}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise SearchProviderError(
                provider="tavily",
                message=f"Request timed out after {self._timeout}s",
                retryable=True,
                original_error=exc,
            ) from exc
        except httpx.HTTPError as exc:
            raise SearchProviderError(
                provider="tavily",
                message=f"Request failed: {exc}",
                retryable=True,
                original_error=exc,
            ) from exc

        if response.status_code == 401:
            raise AuthenticationError(provider="tavily", message="Invalid API key")

        if response.status_code == 429:
            raise RateLimitError(provider="tavily", retry_after=parse_retry_after(response))

        if response.status_code >= 400:
            error_msg = extract_error_message(response)
            raise SearchProviderError(
                provider="tavily",
                message=f"API error {response.status_code}: {error_msg}",
                retryable=response.status_code >= 500,
            )

        return response.json()

    def _parse_response(self, data: dict[str, Any]) -> list[SearchResult]:
        results: list[SearchResult] = []
        for result in data.get("results", []):
            url = result.get("url") or ""
            if not url:
                continue
            results.append(
                SearchResult(
                    url=url,
                    title=result.get("title") or "Untitled",
                    snippet=result.get("content") or "",  # Tavily uses "content" for snippet
                )
            )
        return results
