"""Synthesis phase mixin for DeepResearchWorkflow.

Writes the final markdown report and guarantees it ends with a list of the
sources it cites.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from research_mcp.core.research.models import Finding

if TYPE_CHECKING:
    from research_mcp.core.research.workflows.deep_research.core import (
        DeepResearchWorkflow,
    )

logger = logging.getLogger(__name__)

REPORT_SYSTEM_PROMPT = (
    "You are an expert research report writer. Produce a comprehensive, "
    "well-structured research report based on the findings and analysis provided. "
    "The report should:\n"
    "\n"
    "1. Start with an executive summary\n"
    "2. Cover each major aspect of the topic with detailed analysis\n"
    "3. Note any conflicting information and explain possible reasons\n"
    "4. Include inline citations using [1], [2], etc. referencing the source numbers\n"
    '5. End with a "Sources" section listing all referenced URLs\n'
    "6. Use markdown formatting\n"
    "\n"
    "Write a thorough, objective report."
)

_SOURCES_HEADING = re.compile(r"^\s{0,3}#{1,6}\s*(?:sources|references)\b", re.IGNORECASE | re.MULTILINE)


def format_sources_block(findings: list[Finding]) -> str:
    return "\n\n".join(
        f"[{i}] {finding.title}\n    URL: {finding.url}\n    Key facts: {'; '.join(finding.facts)}"
        for i, finding in enumerate(findings, start=1)
    )


def has_sources_section(report: str) -> bool:
    """Whether the report has a Sources or References heading at any level."""
    return _SOURCES_HEADING.search(report) is not None


def ensure_sources_section(report: str, findings: list[Finding]) -> str:
    """Append a numbered ``## Sources`` list unless the report has one."""
    if has_sources_section(report):
        return report
    entries = "".join(
        f"[{i}] [{finding.title}]({finding.url})\n\n"
        for i, finding in enumerate(findings, start=1)
    )
    return f"{report}\n\n## Sources\n\n{entries}"


class SynthesisPhaseMixin:
    """Report synthesis. Mixed into DeepResearchWorkflow."""

    async def _synthesize_report(
        self: DeepResearchWorkflow,
        topic: str,
        analysis: str,
        findings: list[Finding],
    ) -> str:
        logger.info("Synthesizing report from %d findings", len(findings))
        response = await self.services.completion.complete(
            REPORT_SYSTEM_PROMPT,
            f"Topic: {topic}\n\n"
            f"Cross-reference analysis:\n{analysis}\n\n"
            f"All findings:\n{format_sources_block(findings)}",
        )
        return ensure_sources_section(response.text, findings)
