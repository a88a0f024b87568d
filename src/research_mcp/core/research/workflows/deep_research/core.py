"""Deep research workflow: a checkpointed, resumable step pipeline.

Steps:
1. Planning - decompose the topic into sub-questions
2. Searching - run every candidate query
3. Extraction - visit pages and extract facts
4. Analysis - cross-reference the findings
5. Gap-filling - bounded rounds of extra searches
6. Synthesis - write the report
7. Cleanup - delete the checkpoint and return the report

The session is saved after every completed step. A run that fails keeps its
checkpoint, and calling ``run`` again with the same topic and session id
continues after the last completed step.

Example:
    workflow = DeepResearchWorkflow(services)
    result = await workflow.run("solid-state batteries", depth=ResearchDepth.QUICK)
    if result.success:
        print(result.content)
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Optional

from research_mcp.core.errors.research import (
    CheckpointNotFoundError,
    ResumeError,
    TopicMismatchError,
)
from research_mcp.core.errors.storage import InvalidSessionIdError
from research_mcp.core.research.models import (
    Analyzed,
    Extracted,
    GapFilled,
    NotStarted,
    Planned,
    ResearchDepth,
    ResearchSession,
    Searched,
    StepOutcome,
    Synthesized,
    VisitedUrlSet,
)
from research_mcp.core.research.workflows.base import WorkflowResult
from research_mcp.core.research.workflows.deep_research._constants import (
    MAX_PAGES,
    TOTAL_STEPS,
)
from research_mcp.core.research.workflows.deep_research.context import ResearchServices
from research_mcp.core.research.workflows.deep_research.phases import (
    AnalysisPhaseMixin,
    GapFillingPhaseMixin,
    GatheringPhaseMixin,
    PlanningPhaseMixin,
    SynthesisPhaseMixin,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], Awaitable[None]]
"""Receives ``(step, total_steps, label)``."""

LogCallback = Callable[[str, str], Awaitable[None]]
"""Receives ``(level, message)``; level is debug, info, warning or error."""


def format_failure_message(error: str, session_id: str) -> str:
    return (
        f"Deep research failed: {error}\n\n"
        f'You can resume this session by passing sessionId: "{session_id}" with the same topic.'
    )


def append_session_marker(report: str, session_id: str) -> str:
    return f"{report}\n\n<!-- sessionId: {session_id} -->"


class DeepResearchWorkflow(
    PlanningPhaseMixin,
    GatheringPhaseMixin,
    AnalysisPhaseMixin,
    GapFillingPhaseMixin,
    SynthesisPhaseMixin,
):
    """Multi-step research pipeline over injected collaborators.

    One instance serves one ``run`` at a time; the notification callbacks
    are bound per run.
    """

    def __init__(self, services: ResearchServices) -> None:
        self.services = services
        self._on_progress: Optional[ProgressCallback] = None
        self._on_log: Optional[LogCallback] = None

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    async def _emit_progress(self, step: int, label: str) -> None:
        if self._on_progress is None:
            return
        try:
            await self._on_progress(step, TOTAL_STEPS, label)
        except Exception as exc:
            logger.debug("Failed to send progress notification for step %d: %s", step, exc)

    async def _emit_log(self, level: str, message: str) -> None:
        if self._on_log is None:
            return
        try:
            await self._on_log(level, message)
        except Exception as exc:
            logger.debug("Failed to send log notification %r: %s", message, exc)

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    def _load_or_create_session(
        self,
        topic: str,
        depth: ResearchDepth,
        session_id: Optional[str],
    ) -> ResearchSession:
        """Start a new session, or load the one named by ``session_id``.

        Raises:
            CheckpointNotFoundError: No usable checkpoint for ``session_id``
            TopicMismatchError: The checkpoint belongs to another topic
        """
        if session_id is None:
            return ResearchSession(topic=topic, depth=depth)

        try:
            session = self.services.checkpoints.load(session_id)
        except InvalidSessionIdError as exc:
            raise CheckpointNotFoundError(session_id) from exc
        if session is None:
            raise CheckpointNotFoundError(session_id)
        if session.topic != topic:
            raise TopicMismatchError(session_id, session.topic, topic)
        return session

    def _complete_step(
        self,
        session: ResearchSession,
        visited: VisitedUrlSet,
        outcome: StepOutcome,
    ) -> None:
        session.advance(outcome)
        session.visited_urls = visited.to_list()
        self.services.checkpoints.save(session)

    def _persist_after_failure(self, session: ResearchSession, visited: VisitedUrlSet) -> None:
        session.visited_urls = visited.to_list()
        try:
            self.services.checkpoints.save(session)
        except Exception as exc:
            logger.error("Failed to save checkpoint for session %s after failure: %s", session.session_id, exc)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def run(
        self,
        topic: str,
        depth: ResearchDepth = ResearchDepth.STANDARD,
        session_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_log: Optional[LogCallback] = None,
    ) -> WorkflowResult:
        """Run (or resume) a research session to completion.

        Args:
            topic: Research topic; must equal the stored topic when resuming
            depth: Research depth for a new session; a resumed session keeps
                its stored depth
            session_id: Id of an interrupted session to resume
            on_progress: Async callback for step progress
            on_log: Async callback for human-readable log messages

        Returns:
            WorkflowResult whose content is the report followed by a session
            marker on success, or a failure message naming the session id
        """
        self._on_progress = on_progress
        self._on_log = on_log
        start = time.perf_counter()

        try:
            session = self._load_or_create_session(topic, depth, session_id)
        except ResumeError as exc:
            logger.warning("Rejected resume of session %s: %s", exc.session_id, exc)
            return WorkflowResult(
                success=False,
                content=str(exc),
                session_id=exc.session_id,
                error=str(exc),
                metadata={"resume_rejected": True},
            )

        resumed = session_id is not None
        if resumed:
            logger.info(
                "Resuming deep research %s from step %d: %s",
                session.session_id,
                session.last_completed_step + 1,
                topic[:100],
            )
            await self._emit_log(
                "info",
                f"Resuming deep research session {session.session_id} "
                f"after step {session.last_completed_step}",
            )
        else:
            logger.info("Starting deep research %s (%s): %s", session.session_id, session.depth.value, topic[:100])
            await self._emit_log("info", f"Starting deep research session {session.session_id}")

        visited = VisitedUrlSet(session.visited_urls)
        try:
            await self._execute_steps(session, visited)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception("Deep research %s failed after %.0fms", session.session_id, duration_ms)
            await self._emit_log("error", f"Deep research failed: {error}")
            self._persist_after_failure(session, visited)
            return WorkflowResult(
                success=False,
                content=format_failure_message(error, session.session_id),
                session_id=session.session_id,
                duration_ms=duration_ms,
                error=error,
                metadata={
                    "last_completed_step": session.last_completed_step,
                    "pages_visited": len(visited),
                },
            )

        progress = session.progress
        if not isinstance(progress, Synthesized):
            raise RuntimeError(f"Session {session.session_id} ended at step {progress.last_completed_step}")

        duration_ms = (time.perf_counter() - start) * 1000
        await self._emit_progress(7, "Research complete")
        await self._emit_log(
            "info",
            f"Deep research complete: {len(progress.all_findings)} findings "
            f"from {len(visited)} pages in {duration_ms:.0f}ms",
        )
        logger.info(
            "Deep research %s complete: %d findings, %d pages, %.0fms",
            session.session_id,
            len(progress.all_findings),
            len(visited),
            duration_ms,
        )

        if self.services.archive is not None:
            self.services.archive.save_report(session, progress.report, len(progress.all_findings))
        try:
            self.services.checkpoints.delete(session.session_id)
        except Exception as exc:
            logger.warning("Failed to delete checkpoint for session %s: %s", session.session_id, exc)

        return WorkflowResult(
            success=True,
            content=append_session_marker(progress.report, session.session_id),
            session_id=session.session_id,
            duration_ms=duration_ms,
            metadata={
                "topic": session.topic,
                "depth": session.depth.value,
                "resumed": resumed,
                "pages_visited": len(visited),
                "findings_count": len(progress.all_findings),
            },
        )

    async def _execute_steps(self, session: ResearchSession, visited: VisitedUrlSet) -> None:
        """Run every step after the last completed one.

        Each block advances ``session.progress`` to the variant the next
        block handles, so a resumed session enters at its first missing step.
        """
        topic = session.topic
        depth = session.depth

        progress = session.progress
        if isinstance(progress, NotStarted):
            await self._emit_progress(1, "Decomposing topic into sub-questions")
            await self._emit_log("info", "Step 1: Decomposing topic into sub-questions")
            sub_questions = await self._plan_sub_questions(topic, depth)
            await self._emit_log("info", f"Decomposition complete: {len(sub_questions)} sub-questions")
            self._complete_step(session, visited, progress.planned(sub_questions))

        progress = session.progress
        if isinstance(progress, Planned):
            label = f"Searching for {len(progress.sub_questions)} sub-questions"
            await self._emit_progress(2, label)
            await self._emit_log("info", f"Step 2: {label}")
            hits = await self._search_sub_questions(progress.sub_questions)
            await self._emit_log("info", f"Search complete: {len(hits)} results")
            self._complete_step(session, visited, progress.searched(hits))

        progress = session.progress
        if isinstance(progress, Searched):
            label = f"Extracting content from {len(progress.search_hits)} results"
            await self._emit_progress(3, label)
            await self._emit_log("info", f"Step 3: {label}")
            findings = await self._extract_findings(
                progress.search_hits,
                visited,
                MAX_PAGES[depth],
                session.session_id,
            )
            await self._emit_log("info", f"Extraction complete: {len(findings)} findings")
            self._complete_step(session, visited, progress.extracted(findings))

        progress = session.progress
        if isinstance(progress, Extracted):
            label = f"Cross-referencing {len(progress.findings)} findings"
            await self._emit_progress(4, label)
            await self._emit_log("info", f"Step 4: {label}")
            analysis = await self._cross_reference(topic, progress.findings)
            await self._emit_log("info", "Cross-reference complete")
            self._complete_step(session, visited, progress.analyzed(analysis))

        progress = session.progress
        if isinstance(progress, Analyzed):
            await self._emit_progress(5, "Filling knowledge gaps with additional searches")
            await self._emit_log("info", "Step 5: Filling knowledge gaps")
            all_findings = await self._fill_gaps(
                topic,
                depth,
                progress.analysis,
                progress.findings,
                visited,
                session.session_id,
            )
            await self._emit_log("info", f"Gap-filling complete: {len(all_findings)} findings")
            self._complete_step(session, visited, progress.gap_filled(all_findings))

        progress = session.progress
        if isinstance(progress, GapFilled):
            label = f"Synthesizing report from {len(progress.all_findings)} findings"
            await self._emit_progress(6, label)
            await self._emit_log("info", f"Step 6: {label}")
            report = await self._synthesize_report(topic, progress.analysis, progress.all_findings)
            logger.info("Report synthesized (%d chars)", len(report))
            self._complete_step(session, visited, progress.synthesized(report))
