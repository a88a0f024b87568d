"""Tests for the checkpointed deep research orchestrator."""

import json
import re
import uuid

import pytest

from research_mcp.core.research.archive import ResearchArchive
from research_mcp.core.research.models import (
    Finding,
    Planned,
    ResearchDepth,
    ResearchSession,
    SearchHit,
    SubQuestion,
)
from research_mcp.core.research.workflows.deep_research.core import (
    append_session_marker,
    format_failure_message,
)

URLS = [f"https://site.example/{i}" for i in range(8)]


class Recorder:
    """Collects progress and log notifications."""

    def __init__(self):
        self.progress: list[tuple[int, int, str]] = []
        self.logs: list[tuple[str, str]] = []

    async def on_progress(self, step, total, label):
        self.progress.append((step, total, label))

    async def on_log(self, level, message):
        self.logs.append((level, message))


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def search(search):
    search.table = {"q1": URLS[:3]}
    return search


def _searched_session(topic="battery chemistry", depth=ResearchDepth.QUICK):
    sub_questions = [SubQuestion(question="What is it?", search_queries=["q1"])]
    hits = [SearchHit(question="What is it?", title=f"T{i}", url=url) for i, url in enumerate(URLS)]
    session = ResearchSession(topic=topic, depth=depth)
    session.advance(Planned(sub_questions=sub_questions))
    session.advance(session.progress.searched(hits))
    return session


class TestFreshRun:
    """Tests for a run without a session id."""

    async def test_end_to_end(self, workflow, store, browser, recorder):
        result = await workflow.run(
            "battery chemistry",
            depth=ResearchDepth.QUICK,
            on_progress=recorder.on_progress,
            on_log=recorder.on_log,
        )

        assert result.success
        assert result.content.endswith(f"\n\n<!-- sessionId: {result.session_id} -->")
        assert "## Sources\n\n[1] [Title of https://site.example/0](https://site.example/0)" in result.content
        assert result.metadata == {
            "topic": "battery chemistry",
            "depth": "quick",
            "resumed": False,
            "pages_visited": 3,
            "findings_count": 3,
        }
        assert browser.navigations == URLS[:3]
        assert browser.opened == browser.closed == 3
        assert not store.exists(result.session_id)

    async def test_progress_steps(self, workflow, recorder):
        await workflow.run("battery chemistry", on_progress=recorder.on_progress)

        assert recorder.progress == [
            (1, 7, "Decomposing topic into sub-questions"),
            (2, 7, "Searching for 1 sub-questions"),
            (3, 7, "Extracting content from 3 results"),
            (4, 7, "Cross-referencing 3 findings"),
            (5, 7, "Filling knowledge gaps with additional searches"),
            (6, 7, "Synthesizing report from 3 findings"),
            (7, 7, "Research complete"),
        ]

    async def test_log_messages(self, workflow, recorder):
        await workflow.run("battery chemistry", on_log=recorder.on_log)

        messages = [message for _, message in recorder.logs]
        assert messages[0].startswith("Starting deep research session ")
        assert "Step 1: Decomposing topic into sub-questions" in messages
        assert "Search complete: 3 results" in messages
        assert messages[-1].startswith("Deep research complete: 3 findings from 3 pages")
        assert {level for level, _ in recorder.logs} == {"info"}

    async def test_failing_callbacks_do_not_break_the_run(self, workflow):
        async def explode(*_args):
            raise RuntimeError("client went away")

        result = await workflow.run("battery chemistry", on_progress=explode, on_log=explode)

        assert result.success

    async def test_report_archived(self, workflow, services, tmp_path):
        services.archive = ResearchArchive(tmp_path / "archive")

        result = await workflow.run("battery chemistry")

        report = (tmp_path / "archive" / result.session_id / "report.md").read_text()
        assert 'topic: "battery chemistry"' in report
        assert "sources: 3" in report
        assert report.endswith("## Sources\n\n" + "".join(
            f"[{i}] [Title of {url}]({url})\n\n" for i, url in enumerate(URLS[:3], start=1)
        ))

    async def test_no_search_results_still_reports(self, workflow, search, completion):
        search.table = {}

        result = await workflow.run("obscure topic")

        assert result.success
        assert result.metadata["findings_count"] == 0
        assert completion.calls_for(completion.ANALYST) == ["Topic: obscure topic\n\nFindings:\n"]

    async def test_three_sub_question_quick_run(self, workflow, completion, search, browser, store, recorder):
        completion.replies[completion.PLANNER] = json.dumps(
            [
                {"question": f"Aspect {n}?", "searchQueries": [f"storage {n}a", f"storage {n}b"]}
                for n in range(3)
            ]
        )
        search.table = {
            f"storage {n}{suffix}": [f"https://energy.example/{n}/{suffix}/{i}" for i in range(3)]
            for n in range(3)
            for suffix in "ab"
        }

        result = await workflow.run(
            "renewable energy storage",
            depth=ResearchDepth.QUICK,
            on_progress=recorder.on_progress,
        )

        assert result.success
        assert (2, 7, "Searching for 3 sub-questions") in recorder.progress
        assert len({query for query, _ in search.calls}) == 6
        assert len(browser.navigations) == 5
        assert len(completion.calls_for(completion.GAPS)) <= 1
        assert result.metadata["findings_count"] == 5
        sources = result.content.split("## Sources\n\n", 1)[1]
        assert len(re.findall(r"^\[\d\] \[[^\]]+\]\(https://energy\.example/[^)]+\)$", sources, re.MULTILINE)) == 5
        assert not store.exists(result.session_id)


class TestFailureAndResume:
    """Tests for checkpoint persistence across a failed run."""

    async def test_failure_keeps_checkpoint(self, workflow, completion, store):
        completion.replies[completion.ANALYST] = RuntimeError("model exploded")

        result = await workflow.run("battery chemistry")

        assert not result.success
        assert result.error == "model exploded"
        assert result.content == format_failure_message("model exploded", result.session_id)
        assert f'sessionId: "{result.session_id}"' in result.content
        assert result.metadata == {"last_completed_step": 3, "pages_visited": 3}

        saved = store.load(result.session_id)
        assert saved.last_completed_step == 3
        assert saved.visited_urls == URLS[:3]

    async def test_resume_after_failure(self, workflow, completion, store, browser):
        completion.replies[completion.ANALYST] = RuntimeError("model exploded")
        failed = await workflow.run("battery chemistry")
        completion.replies[completion.ANALYST] = "Consensus."
        planner_calls = len(completion.calls_for(completion.PLANNER))

        result = await workflow.run("battery chemistry", session_id=failed.session_id)

        assert result.success
        assert result.session_id == failed.session_id
        assert result.metadata["resumed"] is True
        assert result.metadata["pages_visited"] == 3
        assert len(completion.calls_for(completion.PLANNER)) == planner_calls
        assert browser.navigations == URLS[:3]
        assert not store.exists(failed.session_id)

    async def test_resume_uses_stored_depth(self, workflow, store, browser):
        session = _searched_session(depth=ResearchDepth.QUICK)
        store.save(session)

        result = await workflow.run(
            "battery chemistry",
            depth=ResearchDepth.DEEP,
            session_id=session.session_id,
        )

        assert result.success
        assert result.metadata["depth"] == "quick"
        assert browser.navigations == URLS[:5]

    async def test_resume_enters_at_first_missing_step(self, workflow, completion, store, search, recorder):
        session = _searched_session()
        store.save(session)

        await workflow.run("battery chemistry", session_id=session.session_id, on_progress=recorder.on_progress)

        assert [step for step, _, _ in recorder.progress] == [3, 4, 5, 6, 7]
        assert search.calls == []
        assert completion.calls_for(completion.PLANNER) == []

    async def test_resume_after_extraction_skips_planning_and_search(
        self, workflow, completion, store, search, browser, recorder
    ):
        session = _searched_session()
        findings = [Finding(url=URLS[0], title="T0", facts=["stored fact"])]
        session.advance(session.progress.extracted(findings))
        session.visited_urls = [URLS[0]]
        store.save(session)

        result = await workflow.run(
            "battery chemistry",
            session_id=session.session_id,
            on_progress=recorder.on_progress,
        )

        assert result.success
        assert [step for step, _, _ in recorder.progress] == [4, 5, 6, 7]
        assert search.calls == []
        assert completion.calls_for(completion.PLANNER) == []
        assert completion.calls_for(completion.FACTS) == []
        assert browser.navigations == []
        assert "stored fact" in completion.calls_for(completion.ANALYST)[0]

    async def test_save_failure_does_not_mask_error(self, workflow, completion, store):
        completion.replies[completion.ANALYST] = RuntimeError("model exploded")
        real_save = store.save
        calls = []

        def flaky_save(session):
            calls.append(session.last_completed_step)
            if len(calls) > 3:
                raise OSError("disk full")
            real_save(session)

        store.save = flaky_save

        result = await workflow.run("battery chemistry")

        assert not result.success
        assert result.error == "model exploded"
        assert calls == [1, 2, 3, 3]


class TestResumeRejection:
    """Tests for resume requests that cannot continue."""

    async def test_topic_mismatch(self, workflow, store, completion):
        session = _searched_session(topic="original topic")
        store.save(session)
        before = (store.storage_path / f"{session.session_id}.json").read_text()

        result = await workflow.run("another topic", session_id=session.session_id)

        assert not result.success
        assert result.metadata == {"resume_rejected": True}
        assert result.content.startswith('Topic mismatch: checkpoint has "original topic"')
        assert (store.storage_path / f"{session.session_id}.json").read_text() == before
        assert completion.calls == []

    @pytest.mark.parametrize("session_id", [str(uuid.uuid4()), "not-a-uuid"])
    async def test_missing_checkpoint(self, workflow, store, session_id):
        result = await workflow.run("battery chemistry", session_id=session_id)

        assert not result.success
        assert result.content == (
            f"No valid checkpoint found for session {session_id}. "
            "Start a fresh research session without a sessionId."
        )
        assert not store.storage_path.exists()

    async def test_corrupt_checkpoint_is_not_resumed(self, workflow, store):
        session_id = str(uuid.uuid4())
        store.storage_path.mkdir(parents=True)
        (store.storage_path / f"{session_id}.json").write_text("{not json")

        result = await workflow.run("battery chemistry", session_id=session_id)

        assert not result.success
        assert result.metadata["resume_rejected"] is True


class TestResultFormatting:
    def test_session_marker(self):
        assert append_session_marker("# R", "abc") == "# R\n\n<!-- sessionId: abc -->"
