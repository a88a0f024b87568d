"""Inspect and discard checkpoints of interrupted research sessions."""

import click

from research_mcp.cli.output import emit_error, emit_success
from research_mcp.config import ServerConfig
from research_mcp.core.research.checkpoint import CheckpointStore
from research_mcp.tools.checkpoints import delete_checkpoint


def _store(config: ServerConfig) -> CheckpointStore:
    return CheckpointStore(config.research.get_checkpoint_dir())


@click.group("checkpoints")
def checkpoints_group() -> None:
    """Manage research checkpoints."""


@checkpoints_group.command("list")
@click.pass_obj
def list_cmd(config: ServerConfig) -> None:
    """List resumable sessions, newest first."""
    sessions = [s.model_dump(mode="json") for s in _store(config).list_sessions()]
    emit_success(sessions=sessions, count=len(sessions))


@checkpoints_group.command("delete")
@click.argument("session_id")
@click.pass_obj
def delete_cmd(config: ServerConfig, session_id: str) -> None:
    """Delete the checkpoint of SESSION_ID."""
    response = delete_checkpoint(_store(config), session_id)
    if not response["success"]:
        emit_error(
            response["error"],
            code=response["data"].get("error_code", "INTERNAL_ERROR"),
            error_type=response["data"].get("error_type", "internal"),
        )
        return
    emit_success(response["data"])
