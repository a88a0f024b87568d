"""Search providers for the research engine.

Exports the SearchProvider interface, concrete backends, and
``create_search_provider`` which selects one from configuration.
"""

from research_mcp.config.research import ResearchConfig
from research_mcp.core.research.providers.base import SearchProvider, SearchResult
from research_mcp.core.research.providers.duckduckgo import DuckDuckGoSearchProvider
from research_mcp.core.research.providers.tavily import TavilySearchProvider


def create_search_provider(config: ResearchConfig) -> SearchProvider:
    """Build the configured search backend.

    Raises:
        ValueError: If tavily is selected without an API key
    """
    if config.search_provider == "tavily":
        return TavilySearchProvider(
            api_key=config.tavily_api_key,
            timeout=config.search_timeout,
        )
    return DuckDuckGoSearchProvider(
        user_agent=config.browser_user_agent,
        timeout=config.search_timeout,
    )


__all__ = [
    "DuckDuckGoSearchProvider",
    "SearchProvider",
    "SearchResult",
    "TavilySearchProvider",
    "create_search_provider",
]
