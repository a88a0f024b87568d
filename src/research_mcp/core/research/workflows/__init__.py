"""Research workflows.

Exports the result type shared by every workflow and the deep research
pipeline.
"""

from research_mcp.core.research.workflows.base import WorkflowResult
from research_mcp.core.research.workflows.deep_research import (
    DeepResearchWorkflow,
    ResearchServices,
)

__all__ = [
    "DeepResearchWorkflow",
    "ResearchServices",
    "WorkflowResult",
]
