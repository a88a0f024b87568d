"""Planning phase mixin for DeepResearchWorkflow.

Decomposes the research topic into sub-questions, each with one or two
search queries, via a single completion call.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from research_mcp.core.research.models import ResearchDepth, SubQuestion
from research_mcp.core.research.workflows.deep_research._constants import (
    SUB_QUESTION_COUNT,
)
from research_mcp.core.research.workflows.deep_research._json_parsing import (
    Parsed,
    parse_json,
)

if TYPE_CHECKING:
    from research_mcp.core.research.workflows.deep_research.core import (
        DeepResearchWorkflow,
    )

logger = logging.getLogger(__name__)


def build_planning_system_prompt(count: int) -> str:
    return (
        "You are a research planning assistant. Decompose the user's research topic "
        f"into {count} specific sub-questions that together provide comprehensive "
        "coverage. For each sub-question, suggest 1-2 search queries.\n"
        "\n"
        "Respond in JSON format:\n"
        "[\n"
        '  { "question": "...", "searchQueries": ["query1", "query2"] }\n'
        "]"
    )


def _coerce_sub_question(entry: Any) -> Optional[SubQuestion]:
    """Turn one array entry into a SubQuestion, or None if it is unusable."""
    if not isinstance(entry, dict):
        return None
    question = entry.get("question")
    if not isinstance(question, str) or not question.strip():
        return None

    raw_queries = entry.get("searchQueries", entry.get("search_queries"))
    queries: list[str] = []
    if isinstance(raw_queries, list):
        queries = [q.strip() for q in raw_queries if isinstance(q, str) and q.strip()]
    if not queries:
        queries = [question.strip()]
    return SubQuestion(question=question.strip(), search_queries=queries)


def parse_sub_questions(reply: str, topic: str) -> list[SubQuestion]:
    """Parse a planning reply, falling back to the topic itself.

    Malformed entries are skipped. When the reply is not a JSON array, or no
    entry survives, the result is a single sub-question whose question and
    only query are the topic.
    """
    result = parse_json(reply)
    if isinstance(result, Parsed) and isinstance(result.value, list):
        sub_questions = [
            sq for sq in (_coerce_sub_question(entry) for entry in result.value) if sq is not None
        ]
        if sub_questions:
            return sub_questions

    logger.warning("Failed to parse topic decomposition, using the topic as the only sub-question")
    return [SubQuestion(question=topic, search_queries=[topic])]


class PlanningPhaseMixin:
    """Planning phase methods. Mixed into DeepResearchWorkflow.

    At runtime, ``self`` is a DeepResearchWorkflow instance providing
    ``services`` and the ``_emit_log`` notification helper.
    """

    async def _plan_sub_questions(
        self: DeepResearchWorkflow,
        topic: str,
        depth: ResearchDepth,
    ) -> list[SubQuestion]:
        """Execute planning: decompose ``topic`` into sub-questions.

        Args:
            topic: Research topic
            depth: Depth controlling how many sub-questions are requested

        Returns:
            At least one sub-question
        """
        count = SUB_QUESTION_COUNT[depth]
        logger.info("Decomposing topic into %d sub-questions: %s", count, topic[:100])

        response = await self.services.completion.complete(
            build_planning_system_prompt(count),
            f"Research topic: {topic}",
        )
        return parse_sub_questions(response.text, topic)
