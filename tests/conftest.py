"""Shared fixtures for research-mcp tests.

Collaborators are in-memory fakes: no network, no browser, no real model.
``FakeCompletion`` routes each call by a phrase from the system prompt so a
test scripts the planner, fact extractor, analyst, gap finder and report
writer independently.
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Union

import pytest

from research_mcp.core.providers.base import CompletionProvider, CompletionResponse
from research_mcp.core.research.checkpoint import CheckpointStore
from research_mcp.core.research.content_extractor import ContentExtractor
from research_mcp.core.research.providers.base import SearchProvider, SearchResult
from research_mcp.core.research.workflows import DeepResearchWorkflow, ResearchServices

PLANNER = "research planning assistant"
FACTS = "fact extraction assistant"
ANALYST = "research analyst"
GAPS = "identify the most important knowledge gaps"
WRITER = "expert research report writer"

Reply = Union[str, Exception, Callable[[str], str]]


class FakeCompletion(CompletionProvider):
    """Completion backend answering by role.

    ``replies`` maps a role phrase to a string, an exception to raise, a
    callable of the user prompt, or a list consumed one reply per call.
    """

    name = "fake"
    default_model = "fake-model"

    PLANNER = PLANNER
    FACTS = FACTS
    ANALYST = ANALYST
    GAPS = GAPS
    WRITER = WRITER

    def __init__(self, replies: dict[str, Any] | None = None) -> None:
        self.replies: dict[str, Any] = replies or {}
        self.calls: list[tuple[str, str, str]] = []

    def calls_for(self, role: str) -> list[str]:
        """User prompts sent for ``role``."""
        return [user for r, _, user in self.calls if r == role]

    async def _complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        role = next((r for r in (PLANNER, FACTS, ANALYST, GAPS, WRITER) if r in system_prompt), "")
        self.calls.append((role, system_prompt, user_prompt))

        reply = self.replies.get(role, "")
        if isinstance(reply, list):
            reply = reply.pop(0) if len(reply) > 1 else reply[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(user_prompt)
        return CompletionResponse(text=reply, model=self.default_model)


class FakeSearch(SearchProvider):
    """Search backend answering from a query -> urls table."""

    def __init__(self, table: dict[str, Any] | None = None) -> None:
        self.table: dict[str, Any] = table or {}
        self.calls: list[tuple[str, int]] = []

    def get_provider_name(self) -> str:
        return "fake"

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        self.calls.append((query, max_results))
        entry = self.table.get(query, [])
        if isinstance(entry, Exception):
            raise entry
        return [
            SearchResult(url=url, title=f"Title of {url}", snippet=f"Snippet of {url}")
            for url in entry
        ][:max_results]


class FakePage:
    def __init__(self, browser: "FakeBrowser") -> None:
        self._browser = browser
        self.url = "about:blank"

    async def navigate(self, url: str, wait_until: str = "load") -> None:
        self._browser.navigations.append(url)
        content = self._browser.pages.get(url, self._browser.default_html)
        if isinstance(content, Exception):
            raise content
        self.url = url

    async def content(self) -> str:
        return self._browser.pages.get(self.url, self._browser.default_html)

    async def screenshot(self, full_page: bool = False) -> bytes:
        return b"\x89PNG fake"


class FakeBrowser:
    """Page source that records every page it opens and closes."""

    def __init__(self, pages: dict[str, Any] | None = None, default_html: str = "Useful page content") -> None:
        self.pages: dict[str, Any] = pages or {}
        self.default_html = default_html
        self.navigations: list[str] = []
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[FakePage]:
        self.opened += 1
        try:
            yield FakePage(self)
        finally:
            self.closed += 1

    async def fetch_html(self, url: str, wait_until: str = "load") -> str:
        async with self.open_page() as page:
            await page.navigate(url, wait_until=wait_until)
            return await page.content()

    async def screenshot(self, url: str, full_page: bool = False) -> bytes:
        async with self.open_page() as page:
            await page.navigate(url)
            return await page.screenshot(full_page=full_page)

    async def close(self) -> None:
        pass


class PassthroughExtractor(ContentExtractor):
    """Treats page HTML as already-extracted markdown."""

    def extract_markdown(self, html: str, url: str | None = None, max_chars: int = 50_000) -> str:
        return html[:max_chars]


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion(
        {
            PLANNER: json.dumps([{"question": "What is it?", "searchQueries": ["q1"]}]),
            FACTS: '["fact one", "fact two"]',
            ANALYST: "Sources [1] and [2] agree.",
            GAPS: "[]",
            WRITER: "# Report\n\nFindings agree [1].",
        }
    )


@pytest.fixture
def search() -> FakeSearch:
    return FakeSearch()


@pytest.fixture
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def store(tmp_path) -> CheckpointStore:
    return CheckpointStore(tmp_path / "checkpoints")


@pytest.fixture
def services(completion, search, browser, store) -> ResearchServices:
    return ResearchServices(
        completion=completion,
        search=search,
        browser=browser,
        checkpoints=store,
        extractor=PassthroughExtractor(),
    )


@pytest.fixture
def workflow(services) -> DeepResearchWorkflow:
    return DeepResearchWorkflow(services)
