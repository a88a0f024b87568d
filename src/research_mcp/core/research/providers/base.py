"""Abstract base class for search providers.

This module defines the SearchProvider interface that all concrete
search providers must implement. The interface enables dependency
injection and easy mocking for testing.

Providers return results in the engine's ranking order; deduplication
across queries is the caller's job.

Example usage:
    class TavilySearchProvider(SearchProvider):
        def get_provider_name(self) -> str:
            return "tavily"

        async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SearchResult:
    """Normalized search result from any provider.

    Attributes:
        url: URL of the search result
        title: Title or headline of the result
        snippet: Brief excerpt or description
    """

    url: str
    title: str
    snippet: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "snippet": self.snippet}


class SearchProvider(ABC):
    """Abstract base class for search providers.

    Subclasses should:
    - Implement get_provider_name() to return a unique identifier
    - Implement search() to execute queries against the provider
    - Optionally override close() to release pooled connections
    """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return the unique identifier for this provider."""

    @abstractmethod
    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        """Execute a search query.

        Args:
            query: The search query string
            max_results: Maximum number of results to return

        Returns:
            Up to ``max_results`` results, best first

        Raises:
            SearchProviderError: On any provider failure
        """

    async def close(self) -> None:
        """Release provider resources."""
