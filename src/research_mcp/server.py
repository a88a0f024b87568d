"""MCP server assembly for research-mcp.

Builds the shared collaborators once, registers the tools and prompt, and
releases the collaborators when the server shuts down.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP

from research_mcp.config import ServerConfig, get_config
from research_mcp.core.providers import CompletionProvider, create_completion_provider
from research_mcp.core.research.archive import ResearchArchive
from research_mcp.core.research.browser import BrowserService
from research_mcp.core.research.checkpoint import CheckpointStore
from research_mcp.core.research.content_extractor import ContentExtractor
from research_mcp.core.research.providers import SearchProvider, create_search_provider
from research_mcp.core.research.workflows import ResearchServices
from research_mcp.tools.browsing import register_browsing_tools
from research_mcp.tools.checkpoints import register_checkpoint_tools
from research_mcp.tools.prompts import register_research_prompts
from research_mcp.tools.research import register_research_tools

logger = logging.getLogger(__name__)


@dataclass
class ServerResources:
    """Collaborators owned by one server instance."""

    search: SearchProvider
    browser: BrowserService
    extractor: ContentExtractor
    checkpoints: CheckpointStore
    archive: Optional[ResearchArchive] = None
    completion: Optional[CompletionProvider] = None

    def research_services(self) -> Optional[ResearchServices]:
        """Workflow services, or None when no completion provider is configured."""
        if self.completion is None:
            return None
        return ResearchServices(
            completion=self.completion,
            search=self.search,
            browser=self.browser,
            checkpoints=self.checkpoints,
            extractor=self.extractor,
            archive=self.archive,
        )

    async def close(self) -> None:
        if self.completion is not None:
            await self.completion.close()
        await self.search.close()
        await self.browser.close()


def build_resources(config: ServerConfig) -> ServerResources:
    """Construct collaborators from configuration. Nothing is started yet."""
    research = config.research
    archive_dir = research.get_archive_dir()
    return ServerResources(
        search=create_search_provider(research),
        browser=BrowserService(
            headless=research.browser_headless,
            user_agent=research.browser_user_agent,
            navigation_timeout=research.navigation_timeout,
        ),
        extractor=ContentExtractor(),
        checkpoints=CheckpointStore(research.get_checkpoint_dir()),
        archive=ResearchArchive(archive_dir) if archive_dir is not None else None,
        completion=create_completion_provider(research),
    )


def create_server(
    config: Optional[ServerConfig] = None,
    resources: Optional[ServerResources] = None,
) -> FastMCP:
    """Create and configure the FastMCP server.

    Args:
        config: Server configuration (loaded from the environment if omitted)
        resources: Prebuilt collaborators (built from ``config`` if omitted)

    Returns:
        Configured FastMCP server instance
    """
    config = config or get_config()
    resources = resources or build_resources(config)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[None]:
        if resources.completion is not None:
            await resources.completion.initialize()
        try:
            yield
        finally:
            await resources.close()

    mcp = FastMCP(name=config.server_name, lifespan=lifespan)

    register_browsing_tools(
        mcp,
        config,
        search=resources.search,
        browser=resources.browser,
        extractor=resources.extractor,
    )
    register_checkpoint_tools(mcp, config, resources.checkpoints)
    register_research_prompts(mcp, config)

    services = resources.research_services() if config.research.enabled else None
    if services is not None:
        register_research_tools(mcp, config, services)
    else:
        logger.info("No LLM provider configured; deep_research tool not available")

    logger.info("Server %s v%s created", config.server_name, config.server_version)
    return mcp


def main() -> None:
    """Run the MCP server over stdio."""
    config = get_config()
    config.setup_logging()
    create_server(config).run()
