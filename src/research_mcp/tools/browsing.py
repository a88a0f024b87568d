"""Manual browsing tools: web search, page visits and screenshots.

These need no completion provider and are always registered.
"""

import json
import logging

from mcp.server.fastmcp import FastMCP, Image
from mcp.server.fastmcp.exceptions import ToolError

from research_mcp.config import ServerConfig
from research_mcp.core.errors import BrowserUnavailableError, SearchProviderError
from research_mcp.core.research.browser import BrowserService
from research_mcp.core.research.content_extractor import ContentExtractor
from research_mcp.core.research.providers.base import SearchProvider

logger = logging.getLogger(__name__)

LINKS_SEPARATOR = "\n\n---\n## Links found on page\n"


def format_page_text(markdown: str, links: list[dict[str, str]] | None = None) -> str:
    """Page markdown, optionally followed by a JSON list of its links."""
    if links is None:
        return markdown
    return markdown + LINKS_SEPARATOR + json.dumps(links, indent=2, ensure_ascii=False)


def register_browsing_tools(
    mcp: FastMCP,
    config: ServerConfig,
    *,
    search: SearchProvider,
    browser: BrowserService,
    extractor: ContentExtractor,
) -> None:
    """Register web_search, visit_page and take_screenshot.

    Args:
        mcp: FastMCP server instance
        config: Server configuration
        search: Search backend
        browser: Shared headless browser
        extractor: HTML to markdown converter
    """

    @mcp.tool(name="web_search")
    async def web_search(query: str, num_results: int = 10) -> str:
        """
        Search the web. Returns titles, URLs and snippets as a JSON array.

        Args:
            query: Search query
            num_results: Number of results to return (default 10)
        """
        if not query.strip():
            raise ToolError("query must not be empty")
        try:
            results = await search.search(query, max_results=max(1, num_results))
        except SearchProviderError as exc:
            raise ToolError(f"Search failed: {exc}") from exc
        return json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False)

    @mcp.tool(name="visit_page")
    async def visit_page(url: str, extract_links: bool = False) -> str:
        """
        Visit a URL and extract its content as clean markdown.

        Uses browser rendering, so JavaScript-heavy sites work.

        Args:
            url: URL to visit
            extract_links: Also return the links found on the page
        """
        try:
            html = await browser.fetch_html(url, wait_until="networkidle")
        except BrowserUnavailableError as exc:
            raise ToolError(str(exc)) from exc
        except Exception as exc:
            logger.warning("visit_page failed for %s: %s", url, exc)
            raise ToolError(f"Failed to load {url}: {exc}") from exc

        markdown = extractor.extract_markdown(html, url)
        links = None
        if extract_links:
            links = [link.to_dict() for link in extractor.extract_links(html, url)]
        return format_page_text(markdown, links)

    @mcp.tool(name="take_screenshot")
    async def take_screenshot(url: str, full_page: bool = False) -> Image:
        """
        Take a PNG screenshot of a web page.

        Args:
            url: URL to screenshot
            full_page: Capture the full scrollable page
        """
        try:
            data = await browser.screenshot(url, full_page=full_page)
        except BrowserUnavailableError as exc:
            raise ToolError(str(exc)) from exc
        except Exception as exc:
            logger.warning("take_screenshot failed for %s: %s", url, exc)
            raise ToolError(f"Failed to capture {url}: {exc}") from exc
        return Image(data=data, format="png")
