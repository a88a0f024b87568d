"""Tests for the research-mcp command line interface."""

import json
import uuid

import pytest
from click.testing import CliRunner

from research_mcp.cli import cli
from research_mcp.config import ServerConfig
from research_mcp.core.research.checkpoint import CheckpointStore
from research_mcp.core.research.models import ResearchSession


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    """Point storage at a temp dir and keep the test logger setup intact."""
    for name in ("LLM_PROVIDER", "RESEARCH_MCP_CONFIG_FILE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("CHECKPOINT_DIR", str(tmp_path / "checkpoints"))
    monkeypatch.setattr(ServerConfig, "setup_logging", lambda self: None)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_store(tmp_path):
    return CheckpointStore(tmp_path / "checkpoints")


class TestCheckpointCommands:
    """Tests for `research-mcp checkpoints`."""

    def test_list_empty(self, runner):
        result = runner.invoke(cli, ["checkpoints", "list"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["data"] == {"sessions": [], "count": 0}

    def test_list_sessions(self, runner, cli_store):
        session = ResearchSession(topic="tidal energy")
        cli_store.save(session)

        result = runner.invoke(cli, ["checkpoints", "list"])

        sessions = json.loads(result.stdout)["data"]["sessions"]
        assert [(s["session_id"], s["topic"], s["depth"]) for s in sessions] == [
            (session.session_id, "tidal energy", "standard")
        ]

    def test_delete(self, runner, cli_store):
        session = ResearchSession(topic="tidal energy")
        cli_store.save(session)

        result = runner.invoke(cli, ["checkpoints", "delete", session.session_id])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["deleted"] is True
        assert not cli_store.exists(session.session_id)

    def test_delete_missing(self, runner):
        result = runner.invoke(cli, ["checkpoints", "delete", str(uuid.uuid4())])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert payload["data"]["error_code"] == "NOT_FOUND"


class TestRunCommand:
    """Tests for `research-mcp run`."""

    def test_requires_provider(self, runner):
        result = runner.invoke(cli, ["run", "tidal energy"])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["data"]["error_code"] == "AI_NO_PROVIDER"
        assert payload["data"]["remediation"] == "Set LLM_PROVIDER and LLM_API_KEY"

    def test_rejects_malformed_session_id(self, runner):
        result = runner.invoke(cli, ["run", "tidal energy", "--session-id", "abc"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["data"]["error_code"] == "INVALID_FORMAT"

    def test_rejects_unknown_depth(self, runner):
        result = runner.invoke(cli, ["run", "tidal energy", "--depth", "extreme"])
        assert result.exit_code == 2


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "research-mcp" in result.output
