"""DuckDuckGo search provider (no API key).

Queries the static HTML endpoint and parses result blocks with BeautifulSoup.
Result links point at a DuckDuckGo redirector; the target URL is recovered
from its ``uddg`` query parameter. Sponsored results are skipped.
"""

import logging
from typing import Optional
from urllib.parse import parse_qs, urlparse

import httpx
from bs4 import BeautifulSoup

from research_mcp.core.errors.search import RateLimitError, SearchProviderError
from research_mcp.core.research.providers.base import SearchProvider, SearchResult
from research_mcp.core.research.providers.shared import parse_retry_after

logger = logging.getLogger(__name__)

DUCKDUCKGO_HTML_URL = "https://html.duckduckgo.com/html/"
DEFAULT_TIMEOUT = 30.0


def _resolve_result_url(href: str) -> Optional[str]:
    """Turn a result href into the destination URL, or None if unusable."""
    if not href:
        return None
    if href.startswith("//"):
        href = "https:" + href
    parsed = urlparse(href)
    if parsed.netloc.endswith("duckduckgo.com") and parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        return target[0] if target else None
    if parsed.scheme in ("http", "https"):
        return href
    return None


def parse_results_html(html: str) -> list[SearchResult]:
    """Parse a DuckDuckGo HTML results page."""
    soup = BeautifulSoup(html, "html.parser")
    results: list[SearchResult] = []
    seen: set[str] = set()

    for block in soup.select("div.result"):
        classes = block.get("class") or []
        if "result--ad" in classes:
            continue
        anchor = block.select_one("a.result__a")
        if anchor is None:
            continue
        url = _resolve_result_url(str(anchor.get("href", "")))
        title = anchor.get_text(" ", strip=True)
        if not url or not title or url in seen:
            continue
        seen.add(url)
        snippet_el = block.select_one(".result__snippet")
        snippet = snippet_el.get_text(" ", strip=True) if snippet_el else ""
        results.append(SearchResult(url=url, title=title, snippet=snippet))

    return results


class DuckDuckGoSearchProvider(SearchProvider):
    """Keyless web search through DuckDuckGo's HTML frontend."""

    def __init__(
        self,
        user_agent: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._user_agent = user_agent
        self._timeout = timeout
        self._transport = transport

    def get_provider_name(self) -> str:
        return "duckduckgo"

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
                headers={"User-Agent": self._user_agent},
            ) as client:
                response = await client.post(DUCKDUCKGO_HTML_URL, data={"q": query})
        except httpx.HTTPError as exc:
            raise SearchProviderError(
                provider="duckduckgo",
                message=f"Request failed: {exc}",
                retryable=True,
                original_error=exc,
            ) from exc

        # DuckDuckGo answers throttled clients with 202 and an empty page
        if response.status_code in (202, 429):
            raise RateLimitError(provider="duckduckgo", retry_after=parse_retry_after(response))
        if response.status_code >= 400:
            raise SearchProviderError(
                provider="duckduckgo",
                message=f"HTTP {response.status_code}",
                retryable=response.status_code >= 500,
            )

        results = parse_results_html(response.text)
        logger.debug("DuckDuckGo returned %d results for %r", len(results), query)
        return results[:max_results]
