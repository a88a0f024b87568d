"""Per-depth budgets and fixed limits for the deep research pipeline."""

from research_mcp.core.research.models.enums import ResearchDepth

TOTAL_STEPS = 7

# Page text sent to the completion provider is cut to this many characters.
MAX_PAGE_CHARS = 20_000

SEARCH_MAX_RESULTS = 5
GAP_SEARCH_MAX_RESULTS = 3

# Fact stored when the extraction reply is not a usable JSON array.
FALLBACK_FACT_CHARS = 500

SUB_QUESTION_COUNT: dict[ResearchDepth, int] = {
    ResearchDepth.QUICK: 3,
    ResearchDepth.STANDARD: 5,
    ResearchDepth.DEEP: 8,
}

MAX_PAGES: dict[ResearchDepth, int] = {
    ResearchDepth.QUICK: 5,
    ResearchDepth.STANDARD: 10,
    ResearchDepth.DEEP: 20,
}

GAP_ROUNDS: dict[ResearchDepth, int] = {
    ResearchDepth.QUICK: 1,
    ResearchDepth.STANDARD: 2,
    ResearchDepth.DEEP: 3,
}
