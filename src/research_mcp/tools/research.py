"""Autonomous deep research tool.

Registered only when a completion provider is configured.
"""

import logging
from typing import Literal, Optional

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from research_mcp.config import ServerConfig
from research_mcp.core.errors.storage import InvalidSessionIdError
from research_mcp.core.research.checkpoint import validate_session_id
from research_mcp.core.research.models import ResearchDepth
from research_mcp.core.research.workflows import DeepResearchWorkflow, ResearchServices

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"debug", "info", "warning", "error"}


def register_research_tools(mcp: FastMCP, config: ServerConfig, services: ResearchServices) -> None:
    """Register the deep_research tool with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        config: Server configuration
        services: Collaborators shared by every research run
    """

    @mcp.tool(name="deep_research")
    async def deep_research(
        topic: str,
        ctx: Context,
        depth: Literal["quick", "standard", "deep"] = "standard",
        sessionId: Optional[str] = None,  # noqa: N803
    ) -> str:
        """
        Perform autonomous deep research on a topic.

        The server decomposes the question, searches, extracts content,
        cross-references findings, fills gaps, and produces a structured
        markdown report with citations.

        Progress is checkpointed after every step. If a run fails, call the
        tool again with the same topic and the sessionId from the error
        message to continue where it stopped.

        Args:
            topic: The research topic or question
            depth: quick (fewer searches), standard, or deep (more thorough)
            sessionId: Session id of an interrupted run to resume

        Returns:
            The report, ending with an HTML comment carrying the session id
        """
        if sessionId is not None:
            try:
                validate_session_id(sessionId)
            except InvalidSessionIdError as exc:
                raise ToolError(str(exc)) from exc

        async def on_progress(step: int, total: int, label: str) -> None:
            await ctx.report_progress(step, total, label)

        async def on_log(level: str, message: str) -> None:
            await ctx.log(level if level in _LOG_LEVELS else "info", message, logger_name="deep_research")

        workflow = DeepResearchWorkflow(services)
        result = await workflow.run(
            topic,
            depth=ResearchDepth(depth),
            session_id=sessionId,
            on_progress=on_progress,
            on_log=on_log,
        )
        if not result.success:
            raise ToolError(result.content)
        return result.content

    logger.info("deep_research tool registered (provider=%s)", config.research.llm_provider)
