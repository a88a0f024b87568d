"""Analysis phase mixin for DeepResearchWorkflow.

Cross-references the findings in one completion call. The reply is kept
verbatim.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from research_mcp.core.research.models import Finding

if TYPE_CHECKING:
    from research_mcp.core.research.workflows.deep_research.core import (
        DeepResearchWorkflow,
    )

logger = logging.getLogger(__name__)

CROSS_REFERENCE_SYSTEM_PROMPT = (
    "You are a research analyst. Analyze the collected findings for the given "
    "topic. Identify:\n"
    "1. Points of consensus across sources\n"
    "2. Conflicting information\n"
    "3. Knowledge gaps that need further research\n"
    "\n"
    "Be specific and reference source numbers [1], [2], etc."
)


def format_findings_summary(findings: list[Finding]) -> str:
    """Number findings from 1 as ``[i] title (url)`` plus their facts."""
    return "\n\n".join(
        f"[{i}] {finding.title} ({finding.url})\nFacts: {'; '.join(finding.facts)}"
        for i, finding in enumerate(findings, start=1)
    )


class AnalysisPhaseMixin:
    """Cross-reference methods. Mixed into DeepResearchWorkflow."""

    async def _cross_reference(
        self: DeepResearchWorkflow,
        topic: str,
        findings: list[Finding],
    ) -> str:
        logger.info("Cross-referencing %d findings", len(findings))
        response = await self.services.completion.complete(
            CROSS_REFERENCE_SYSTEM_PROMPT,
            f"Topic: {topic}\n\nFindings:\n{format_findings_summary(findings)}",
        )
        return response.text
