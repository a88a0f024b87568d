"""Gap-filling phase mixin for DeepResearchWorkflow.

A bounded loop: each round asks for search queries that cover knowledge gaps
in the analysis, searches them, and extracts the pages not yet visited.

The loop stops early when the model names no gaps (or its reply cannot be
read) and when the searches produce no unvisited URL.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from research_mcp.core.research.models import (
    Finding,
    ResearchDepth,
    SearchHit,
    VisitedUrlSet,
)
from research_mcp.core.research.workflows.deep_research._constants import (
    GAP_ROUNDS,
    GAP_SEARCH_MAX_RESULTS,
    MAX_PAGES,
)
from research_mcp.core.research.workflows.deep_research._json_parsing import (
    parse_string_list,
)

if TYPE_CHECKING:
    from research_mcp.core.research.workflows.deep_research.core import (
        DeepResearchWorkflow,
    )

logger = logging.getLogger(__name__)

GAP_QUERY_SYSTEM_PROMPT = (
    "You are a research assistant. Based on the analysis below, identify the most "
    "important knowledge gaps and generate 1-3 search queries to fill them. If there "
    "are no significant gaps, return an empty array.\n"
    "\n"
    "Respond in JSON format:\n"
    '["query1", "query2"]'
)


def build_gap_query_user_prompt(topic: str, analysis: str, source_count: int) -> str:
    return f"Topic: {topic}\n\nAnalysis:\n{analysis}\n\nExisting sources: {source_count}"


class GapFillingPhaseMixin:
    """Gap-filling loop. Mixed into DeepResearchWorkflow.

    At runtime, ``self`` is a DeepResearchWorkflow instance providing
    ``services`` and ``_extract_findings`` (from GatheringPhaseMixin).
    """

    async def _fill_gaps(
        self: DeepResearchWorkflow,
        topic: str,
        depth: ResearchDepth,
        analysis: str,
        findings: list[Finding],
        visited: VisitedUrlSet,
        session_id: str,
    ) -> list[Finding]:
        """Run up to the depth's round limit of gap searches.

        Args:
            topic: Research topic
            depth: Depth controlling the round limit
            analysis: Cross-reference analysis, reused unchanged every round
            findings: Findings from the initial extraction
            visited: Session-wide visited set; only grows
            session_id: Session the pages are archived under

        Returns:
            ``findings`` followed by every finding gathered in gap rounds
        """
        all_findings = list(findings)
        max_rounds = GAP_ROUNDS[depth]

        for round_number in range(1, max_rounds + 1):
            logger.debug("Gap-filling round %d/%d", round_number, max_rounds)

            response = await self.services.completion.complete(
                GAP_QUERY_SYSTEM_PROMPT,
                build_gap_query_user_prompt(topic, analysis, len(all_findings)),
            )
            queries = parse_string_list(response.text)
            if not queries:
                logger.info("No gaps identified, stopping gap-filling")
                break

            gap_hits = await self._search_gap_queries(queries, visited)
            if not gap_hits:
                logger.info("No new URLs from gap search, stopping gap-filling")
                break

            new_findings = await self._extract_findings(
                gap_hits,
                visited,
                MAX_PAGES[ResearchDepth.QUICK],
                session_id,
            )
            all_findings.extend(new_findings)

        return all_findings

    async def _search_gap_queries(
        self: DeepResearchWorkflow,
        queries: list[str],
        visited: VisitedUrlSet,
    ) -> list[SearchHit]:
        """Search gap queries, keeping only hits whose URL is unvisited.

        Hits are tagged with the gap query as their question.
        """
        hits: list[SearchHit] = []
        for query in queries:
            try:
                results = await self.services.search.search(query, max_results=GAP_SEARCH_MAX_RESULTS)
            except Exception as exc:
                logger.warning("Gap search failed: %s: %s", query, exc)
                continue
            hits.extend(
                SearchHit(question=query, title=result.title, url=result.url, snippet=result.snippet)
                for result in results
                if result.url not in visited
            )
        return hits
