"""Gathering phase mixin for DeepResearchWorkflow.

Runs every candidate search query, then visits the resulting pages one at a
time and extracts facts relevant to the originating sub-question.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from research_mcp.core.research.models import (
    Finding,
    SearchHit,
    SubQuestion,
    VisitedUrlSet,
)
from research_mcp.core.research.workflows.deep_research._constants import (
    FALLBACK_FACT_CHARS,
    MAX_PAGE_CHARS,
    SEARCH_MAX_RESULTS,
)
from research_mcp.core.research.workflows.deep_research._json_parsing import (
    parse_string_list,
)

if TYPE_CHECKING:
    from research_mcp.core.research.workflows.deep_research.core import (
        DeepResearchWorkflow,
    )

logger = logging.getLogger(__name__)

FACT_EXTRACTION_SYSTEM_PROMPT = (
    "You are a fact extraction assistant. Extract the key facts relevant to the "
    "research question from the web page content below. Return a JSON array of "
    "fact strings.\n"
    "\n"
    "Respond in JSON format:\n"
    '["fact 1", "fact 2", ...]'
)


def build_fact_extraction_user_prompt(hit: SearchHit, markdown: str) -> str:
    return (
        f"Research question: {hit.question}\n\n"
        f"Page title: {hit.title}\n"
        f"URL: {hit.url}\n\n"
        f"Content:\n{markdown}"
    )


def dedupe_hits(hits: Iterable[SearchHit]) -> list[SearchHit]:
    """Drop hits whose URL appeared earlier; the first occurrence wins."""
    seen: set[str] = set()
    unique: list[SearchHit] = []
    for hit in hits:
        if hit.url in seen:
            continue
        seen.add(hit.url)
        unique.append(hit)
    return unique


def facts_from_reply(reply: str) -> list[str]:
    """Facts from an extraction reply, or the truncated reply as one fact."""
    facts = parse_string_list(reply)
    if facts:
        return facts
    return [reply[:FALLBACK_FACT_CHARS]]


class GatheringPhaseMixin:
    """Search and extraction methods. Mixed into DeepResearchWorkflow.

    At runtime, ``self`` is a DeepResearchWorkflow instance providing
    ``services``.
    """

    async def _search_sub_questions(
        self: DeepResearchWorkflow,
        sub_questions: list[SubQuestion],
    ) -> list[SearchHit]:
        """Run every query of every sub-question, sequentially.

        A failing query is logged and skipped.
        """
        hits: list[SearchHit] = []
        for sub_question in sub_questions:
            for query in sub_question.search_queries:
                try:
                    results = await self.services.search.search(query, max_results=SEARCH_MAX_RESULTS)
                except Exception as exc:
                    logger.warning("Search query failed: %s: %s", query, exc)
                    continue
                hits.extend(
                    SearchHit(
                        question=sub_question.question,
                        title=result.title,
                        url=result.url,
                        snippet=result.snippet,
                    )
                    for result in results
                )
        return hits

    async def _extract_findings(
        self: DeepResearchWorkflow,
        hits: list[SearchHit],
        visited: VisitedUrlSet,
        max_pages: int,
        session_id: str,
    ) -> list[Finding]:
        """Visit up to ``max_pages`` distinct URLs and extract their facts.

        The hit list is deduplicated and capped before already-visited URLs
        are skipped, so previously visited URLs still count against the cap.
        Each URL joins ``visited`` before it is fetched.

        Args:
            hits: Search hits, in priority order
            visited: Session-wide visited set; only grows
            max_pages: Page budget for this call
            session_id: Session the pages are archived under

        Returns:
            One finding per page that produced content
        """
        findings: list[Finding] = []
        for hit in dedupe_hits(hits)[:max_pages]:
            if hit.url in visited:
                continue
            visited.add(hit.url)

            finding = await self._extract_page(hit, session_id)
            if finding is not None:
                findings.append(finding)
        return findings

    async def _extract_page(
        self: DeepResearchWorkflow,
        hit: SearchHit,
        session_id: str,
    ) -> Optional[Finding]:
        """Fetch one page and extract its facts; None when it yields nothing."""
        try:
            async with self.services.browser.open_page() as page:
                await page.navigate(hit.url, wait_until="load")
                html = await page.content()

            markdown = self.services.extractor.extract_markdown(html, hit.url, MAX_PAGE_CHARS)
            markdown = markdown[:MAX_PAGE_CHARS]
            if not markdown.strip():
                logger.debug("Empty content, skipping %s", hit.url)
                return None

            if self.services.archive is not None:
                self.services.archive.save_source(session_id, hit.url, hit.title, markdown)

            response = await self.services.completion.complete(
                FACT_EXTRACTION_SYSTEM_PROMPT,
                build_fact_extraction_user_prompt(hit, markdown),
            )
        except Exception as exc:
            logger.warning("Page extraction failed for %s: %s", hit.url, exc)
            return None

        return Finding(url=hit.url, title=hit.title, facts=facts_from_reply(response.text))
