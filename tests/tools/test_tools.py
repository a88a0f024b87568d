"""Tests for MCP tool registration and tool behavior."""

import json
import re
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from research_mcp.config import ServerConfig
from research_mcp.core.research.content_extractor import ContentExtractor
from research_mcp.core.research.models import ResearchSession
from research_mcp.server import ServerResources, create_server
from research_mcp.tools.browsing import LINKS_SEPARATOR, format_page_text
from research_mcp.tools.checkpoints import delete_checkpoint, list_checkpoints
from research_mcp.tools.prompts import build_research_guide

BROWSING_TOOLS = {"web_search", "visit_page", "take_screenshot", "research_checkpoints"}


@pytest.fixture
def resources(completion, search, browser, store):
    return ServerResources(
        search=search,
        browser=browser,
        extractor=ContentExtractor(),
        checkpoints=store,
        completion=completion,
    )


@pytest.fixture
def server(resources):
    return create_server(ServerConfig(), resources)


def _tool(server, name):
    """The undecorated tool function registered under ``name``."""
    return server._tool_manager.get_tool(name).fn


def _context():
    ctx = MagicMock()
    ctx.report_progress = AsyncMock()
    ctx.log = AsyncMock()
    return ctx


class TestRegistration:
    """Tests for create_server tool registration."""

    async def test_all_tools_with_completion_provider(self, server):
        names = {tool.name for tool in await server.list_tools()}
        assert names == BROWSING_TOOLS | {"deep_research"}

    async def test_no_deep_research_without_provider(self, resources):
        resources.completion = None
        server = create_server(ServerConfig(), resources)

        names = {tool.name for tool in await server.list_tools()}

        assert names == BROWSING_TOOLS

    async def test_no_deep_research_when_disabled(self, resources):
        config = ServerConfig()
        config.research.enabled = False
        server = create_server(config, resources)

        names = {tool.name for tool in await server.list_tools()}

        assert "deep_research" not in names

    async def test_prompt_registered(self, server):
        prompts = await server.list_prompts()
        assert [p.name for p in prompts] == ["deep-research"]


class TestBrowsingTools:
    """Tests for web_search, visit_page and take_screenshot."""

    async def test_web_search_returns_json(self, server, search):
        search.table = {"solar": ["https://a.example", "https://b.example"]}

        text = await _tool(server, "web_search")(query="solar", num_results=1)

        assert json.loads(text) == [
            {"title": "Title of https://a.example", "url": "https://a.example", "snippet": "Snippet of https://a.example"}
        ]
        assert search.calls == [("solar", 1)]

    async def test_web_search_rejects_empty_query(self, server):
        with pytest.raises(ToolError, match="must not be empty"):
            await _tool(server, "web_search")(query="   ")

    async def test_visit_page_with_links(self, server, browser):
        browser.pages["https://e.example/page"] = (
            "<html><body><nav>Menu</nav><main><p>Hello <a href='/x'>there</a></p></main></body></html>"
        )

        text = await _tool(server, "visit_page")(url="https://e.example/page", extract_links=True)

        markdown, links = text.split(LINKS_SEPARATOR)
        assert markdown == "Hello [there](https://e.example/x)"
        assert json.loads(links) == [{"text": "there", "href": "https://e.example/x"}]

    async def test_visit_page_failure(self, server, browser):
        browser.pages["https://down.example"] = RuntimeError("net::ERR_NAME_NOT_RESOLVED")

        with pytest.raises(ToolError, match="Failed to load https://down.example"):
            await _tool(server, "visit_page")(url="https://down.example")

        assert browser.closed == browser.opened

    async def test_take_screenshot(self, server):
        image = await _tool(server, "take_screenshot")(url="https://e.example")
        assert image.data == b"\x89PNG fake"

    def test_format_page_text_without_links(self):
        assert format_page_text("# Page") == "# Page"


class TestDeepResearchTool:
    """Tests for the deep_research tool."""

    async def test_returns_report_and_reports_progress(self, server, search):
        search.table = {"q1": ["https://a.example"]}
        ctx = _context()

        text = await _tool(server, "deep_research")(topic="solar", ctx=ctx, depth="quick")

        assert text.startswith("# Report")
        assert "<!-- sessionId: " in text
        assert ctx.report_progress.await_count == 7
        ctx.report_progress.assert_awaited_with(7, 7, "Research complete")
        ctx.log.assert_any_await("info", "Step 1: Decomposing topic into sub-questions", logger_name="deep_research")

    async def test_invalid_session_id(self, server, completion):
        with pytest.raises(ToolError, match="Invalid session id"):
            await _tool(server, "deep_research")(topic="solar", ctx=_context(), sessionId="../../etc")

        assert completion.calls == []

    async def test_failure_names_session(self, server, completion):
        completion.replies[completion.WRITER] = RuntimeError("context length exceeded")

        with pytest.raises(ToolError, match="You can resume this session by passing sessionId"):
            await _tool(server, "deep_research")(topic="solar", ctx=_context())

    async def test_unknown_session(self, server):
        session_id = str(uuid.uuid4())

        with pytest.raises(ToolError, match="No valid checkpoint found"):
            await _tool(server, "deep_research")(topic="solar", ctx=_context(), sessionId=session_id)

    async def test_schema_uses_session_id_from_failure_message(self, server):
        tools = {tool.name: tool for tool in await server.list_tools()}
        assert set(tools["deep_research"].inputSchema["properties"]) == {"topic", "depth", "sessionId"}

    async def test_resume_with_id_from_failure_message(self, server, completion, search, store):
        search.table = {"q1": ["https://a.example"]}
        completion.replies[completion.ANALYST] = RuntimeError("model exploded")

        with pytest.raises(ToolError) as excinfo:
            await server.call_tool("deep_research", {"topic": "solar", "depth": "quick"})
        failed_id = re.search(r'sessionId: "([0-9a-f-]+)"', str(excinfo.value)).group(1)
        assert store.exists(failed_id)

        completion.replies[completion.ANALYST] = "Consensus."
        result = await server.call_tool(
            "deep_research",
            {"topic": "solar", "depth": "quick", "sessionId": failed_id},
        )

        content = result[0] if isinstance(result, tuple) else result
        assert content[0].text.endswith(f"<!-- sessionId: {failed_id} -->")
        assert len(completion.calls_for(completion.PLANNER)) == 1
        assert len(search.calls) == 1
        assert not store.exists(failed_id)


class TestCheckpointTool:
    """Tests for the research_checkpoints envelopes."""

    def test_list(self, store):
        older = ResearchSession(topic="older")
        store.save(older)
        newer = ResearchSession(topic="newer")
        store.save(newer)

        response = list_checkpoints(store)

        assert response["success"] is True
        assert response["data"]["count"] == 2
        assert [s["topic"] for s in response["data"]["sessions"]] == ["newer", "older"]
        assert response["meta"]["version"] == "response-v2"

    def test_delete(self, store):
        session = ResearchSession(topic="t")
        store.save(session)

        response = delete_checkpoint(store, session.session_id)

        assert response["success"] is True
        assert response["data"] == {"session_id": session.session_id, "deleted": True}
        assert not store.exists(session.session_id)

    @pytest.mark.parametrize(
        "session_id, code",
        [(None, "MISSING_REQUIRED"), ("nope", "INVALID_FORMAT"), (str(uuid.uuid4()), "NOT_FOUND")],
    )
    def test_delete_errors(self, store, session_id, code):
        response = delete_checkpoint(store, session_id)

        assert response["success"] is False
        assert response["data"]["error_code"] == code

    def test_tool_dispatches_on_action(self, server, store):
        session = ResearchSession(topic="t")
        store.save(session)
        tool = _tool(server, "research_checkpoints")

        assert tool()["data"]["count"] == 1
        assert tool(action="delete", session_id=session.session_id)["success"] is True
        assert tool(action="list")["data"]["count"] == 0


class TestResearchGuide:
    """Tests for the deep-research prompt text."""

    @pytest.mark.parametrize("depth, count", [("quick", "3"), ("standard", "5"), ("deep", "7")])
    def test_sub_question_count(self, depth, count):
        guide = build_research_guide("fusion power", depth)

        assert f"Break the topic into {count} focused sub-questions" in guide
        assert "**Topic:** fusion power" in guide
        assert f"**Depth:** {depth}" in guide

    def test_gap_rounds(self):
        assert "do one round of gap-filling" in build_research_guide("t", "quick")
        assert "two to three rounds" in build_research_guide("t", "deep")
