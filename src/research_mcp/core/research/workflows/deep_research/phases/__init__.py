"""Phase mixins composed into ``DeepResearchWorkflow``."""

from research_mcp.core.research.workflows.deep_research.phases.analysis import (
    AnalysisPhaseMixin,
)
from research_mcp.core.research.workflows.deep_research.phases.gap_filling import (
    GapFillingPhaseMixin,
)
from research_mcp.core.research.workflows.deep_research.phases.gathering import (
    GatheringPhaseMixin,
)
from research_mcp.core.research.workflows.deep_research.phases.planning import (
    PlanningPhaseMixin,
)
from research_mcp.core.research.workflows.deep_research.phases.synthesis import (
    SynthesisPhaseMixin,
)

__all__ = [
    "AnalysisPhaseMixin",
    "GapFillingPhaseMixin",
    "GatheringPhaseMixin",
    "PlanningPhaseMixin",
    "SynthesisPhaseMixin",
]
