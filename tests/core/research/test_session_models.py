"""Tests for research session models and step outcomes."""

import pytest
from pydantic import ValidationError

from research_mcp.core.research.models import (
    Analyzed,
    Finding,
    NotStarted,
    Planned,
    ResearchSession,
    SubQuestion,
    VisitedUrlSet,
)


class TestStepOutcomes:
    """Tests for the step outcome variants."""

    def test_new_session_has_not_started(self):
        session = ResearchSession(topic="t")
        assert isinstance(session.progress, NotStarted)
        assert session.last_completed_step == 0
        assert session.visited_urls == []

    def test_transitions_carry_payloads_forward(self):
        sub_questions = [SubQuestion(question="q", search_queries=["q"])]
        finding = Finding(url="https://a.example", title="A", facts=["f"])

        analyzed = NotStarted().planned(sub_questions).searched([]).extracted([finding]).analyzed("notes")

        assert isinstance(analyzed, Analyzed)
        assert analyzed.sub_questions == sub_questions
        assert analyzed.findings == [finding]
        assert analyzed.analysis == "notes"

    def test_advance_rejects_skipping_steps(self):
        session = ResearchSession(topic="t")
        skipped = NotStarted().planned([]).searched([])

        with pytest.raises(ValueError):
            session.advance(skipped)
        assert session.last_completed_step == 0

    def test_variants_forbid_extra_fields(self):
        with pytest.raises(ValidationError):
            Planned(sub_questions=[], analysis="not yet")

    def test_discriminated_union_round_trip(self):
        session = ResearchSession(topic="t")
        session.advance(session.progress.planned([SubQuestion(question="q", search_queries=["a", "b"])]))

        restored = ResearchSession.model_validate(session.model_dump(mode="json"))

        assert isinstance(restored.progress, Planned)
        assert restored.progress.sub_questions[0].search_queries == ["a", "b"]

    def test_missing_payload_fails_validation(self):
        data = ResearchSession(topic="t").model_dump(mode="json")
        data["progress"] = {"last_completed_step": 4, "analysis": "only this"}

        with pytest.raises(ValidationError):
            ResearchSession.model_validate(data)

    def test_finding_requires_a_fact(self):
        with pytest.raises(ValidationError):
            Finding(url="https://a.example", title="A", facts=[])


class TestVisitedUrlSet:
    """Tests for VisitedUrlSet."""

    def test_keeps_insertion_order_and_set_semantics(self):
        visited = VisitedUrlSet(["b", "a"])
        visited.add("c")
        visited.add("a")

        assert visited.to_list() == ["b", "a", "c"]
        assert len(visited) == 3
        assert "c" in visited

    def test_discard(self):
        visited = VisitedUrlSet(["a"])
        visited.discard("a")
        visited.discard("missing")
        assert visited.to_list() == []
