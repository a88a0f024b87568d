"""Research session models.

A ``ResearchSession`` is the single mutable, persisted entity of a research
run. Its ``progress`` field is a step outcome: one variant per completed
pipeline step, each carrying exactly the payloads produced so far. The
variants are tagged by ``last_completed_step`` and move forward through
their transition methods only.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSet
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from research_mcp.core.research.models.enums import ResearchDepth

CHECKPOINT_SCHEMA_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Write-once entities
# =============================================================================


class SubQuestion(BaseModel):
    """One facet of the topic with the queries used to research it."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(..., description="Sub-question text")
    search_queries: list[str] = Field(default_factory=list, description="Candidate search queries")


class SearchHit(BaseModel):
    """A search result tagged with the sub-question (or gap query) that produced it."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(..., description="Originating sub-question text")
    title: str
    url: str
    snippet: str = ""


class Finding(BaseModel):
    """Facts extracted from one successfully processed page."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    facts: list[str] = Field(..., min_length=1)


# =============================================================================
# Step outcomes
# =============================================================================

_OUTCOME_CONFIG = ConfigDict(extra="forbid", frozen=True)


class NotStarted(BaseModel):
    """No step has completed yet."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[0] = 0

    def planned(self, sub_questions: list[SubQuestion]) -> Planned:
        return Planned(sub_questions=sub_questions)


class Planned(BaseModel):
    """Step 1 done: the topic is decomposed into sub-questions."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[1] = 1
    sub_questions: list[SubQuestion]

    def searched(self, search_hits: list[SearchHit]) -> Searched:
        return Searched(sub_questions=self.sub_questions, search_hits=search_hits)


class Searched(BaseModel):
    """Step 2 done: every candidate query has been searched."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[2] = 2
    sub_questions: list[SubQuestion]
    search_hits: list[SearchHit]

    def extracted(self, findings: list[Finding]) -> Extracted:
        return Extracted(
            sub_questions=self.sub_questions,
            search_hits=self.search_hits,
            findings=findings,
        )


class Extracted(BaseModel):
    """Step 3 done: pages are visited and facts extracted."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[3] = 3
    sub_questions: list[SubQuestion]
    search_hits: list[SearchHit]
    findings: list[Finding]

    def analyzed(self, analysis: str) -> Analyzed:
        return Analyzed(
            sub_questions=self.sub_questions,
            search_hits=self.search_hits,
            findings=self.findings,
            analysis=analysis,
        )


class Analyzed(BaseModel):
    """Step 4 done: findings are cross-referenced."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[4] = 4
    sub_questions: list[SubQuestion]
    search_hits: list[SearchHit]
    findings: list[Finding]
    analysis: str

    def gap_filled(self, all_findings: list[Finding]) -> GapFilled:
        return GapFilled(
            sub_questions=self.sub_questions,
            search_hits=self.search_hits,
            findings=self.findings,
            analysis=self.analysis,
            all_findings=all_findings,
        )


class GapFilled(BaseModel):
    """Step 5 done: gap rounds have merged extra findings into ``all_findings``."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[5] = 5
    sub_questions: list[SubQuestion]
    search_hits: list[SearchHit]
    findings: list[Finding]
    analysis: str
    all_findings: list[Finding]

    def synthesized(self, report: str) -> Synthesized:
        return Synthesized(
            sub_questions=self.sub_questions,
            search_hits=self.search_hits,
            findings=self.findings,
            analysis=self.analysis,
            all_findings=self.all_findings,
            report=report,
        )


class Synthesized(BaseModel):
    """Step 6 done: the final report is written."""

    model_config = _OUTCOME_CONFIG

    last_completed_step: Literal[6] = 6
    sub_questions: list[SubQuestion]
    search_hits: list[SearchHit]
    findings: list[Finding]
    analysis: str
    all_findings: list[Finding]
    report: str


StepOutcome = Annotated[
    Union[NotStarted, Planned, Searched, Extracted, Analyzed, GapFilled, Synthesized],
    Field(discriminator="last_completed_step"),
]


# =============================================================================
# Session
# =============================================================================


class ResearchSession(BaseModel):
    """Persisted state of one resumable research run."""

    version: int = Field(default=CHECKPOINT_SCHEMA_VERSION, description="Checkpoint schema version")
    session_id: str = Field(default_factory=lambda: str(uuid4()))
    topic: str
    depth: ResearchDepth = ResearchDepth.STANDARD
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    visited_urls: list[str] = Field(
        default_factory=list,
        description="URLs fetched so far, in visit order",
    )
    progress: StepOutcome = Field(default_factory=NotStarted)

    @property
    def last_completed_step(self) -> int:
        return self.progress.last_completed_step

    def advance(self, outcome: StepOutcome) -> None:
        """Record the outcome of the next step.

        Raises:
            ValueError: If ``outcome`` is not exactly one step ahead
        """
        expected = self.last_completed_step + 1
        if outcome.last_completed_step != expected:
            raise ValueError(
                f"Cannot move session {self.session_id} from step "
                f"{self.last_completed_step} to step {outcome.last_completed_step}"
            )
        self.progress = outcome

    def touch(self) -> None:
        self.updated_at = _utcnow()


class CheckpointSummary(BaseModel):
    """Listing entry for a stored checkpoint."""

    session_id: str
    topic: str
    depth: ResearchDepth
    last_completed_step: int
    visited_url_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: ResearchSession) -> "CheckpointSummary":
        return cls(
            session_id=session.session_id,
            topic=session.topic,
            depth=session.depth,
            last_completed_step=session.last_completed_step,
            visited_url_count=len(session.visited_urls),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class VisitedUrlSet(MutableSet[str]):
    """Insertion-ordered set of visited URLs.

    Shared by the initial extraction and every gap round of one session.
    """

    def __init__(self, urls: Optional[Iterable[str]] = None) -> None:
        self._urls: dict[str, None] = dict.fromkeys(urls or ())

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    def add(self, url: str) -> None:
        self._urls[url] = None

    def discard(self, url: str) -> None:
        self._urls.pop(url, None)

    def to_list(self) -> list[str]:
        return list(self._urls)

    def __repr__(self) -> str:
        return f"VisitedUrlSet({self.to_list()!r})"
