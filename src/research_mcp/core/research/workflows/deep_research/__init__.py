"""Deep research workflow package."""

from research_mcp.core.research.workflows.deep_research._json_parsing import (
    Fallback,
    ParseResult,
    Parsed,
    parse_json,
)
from research_mcp.core.research.workflows.deep_research.context import ResearchServices
from research_mcp.core.research.workflows.deep_research.core import (
    DeepResearchWorkflow,
    LogCallback,
    ProgressCallback,
)

__all__ = [
    "DeepResearchWorkflow",
    "Fallback",
    "LogCallback",
    "ParseResult",
    "Parsed",
    "ProgressCallback",
    "ResearchServices",
    "parse_json",
]
