"""Pydantic models for research sessions."""

from research_mcp.core.research.models.enums import ResearchDepth
from research_mcp.core.research.models.session import (
    CHECKPOINT_SCHEMA_VERSION,
    Analyzed,
    CheckpointSummary,
    Extracted,
    Finding,
    GapFilled,
    NotStarted,
    Planned,
    ResearchSession,
    Searched,
    SearchHit,
    StepOutcome,
    SubQuestion,
    Synthesized,
    VisitedUrlSet,
)

__all__ = [
    "CHECKPOINT_SCHEMA_VERSION",
    "ResearchDepth",
    "ResearchSession",
    "CheckpointSummary",
    "StepOutcome",
    "NotStarted",
    "Planned",
    "Searched",
    "Extracted",
    "Analyzed",
    "GapFilled",
    "Synthesized",
    "SubQuestion",
    "SearchHit",
    "Finding",
    "VisitedUrlSet",
]
