"""Checkpoint management tool for interrupted research sessions."""

import logging
from dataclasses import asdict
from typing import Literal, Optional

from mcp.server.fastmcp import FastMCP

from research_mcp.config import ServerConfig
from research_mcp.core.errors import error_to_response
from research_mcp.core.errors.storage import InvalidSessionIdError, LockAcquisitionError
from research_mcp.core.research.checkpoint import CheckpointStore
from research_mcp.core.responses import ErrorCode, ErrorType, error_response, success_response

logger = logging.getLogger(__name__)


def list_checkpoints(store: CheckpointStore) -> dict:
    sessions = [summary.model_dump(mode="json") for summary in store.list_sessions()]
    return asdict(success_response(sessions=sessions, count=len(sessions)))


def delete_checkpoint(store: CheckpointStore, session_id: Optional[str]) -> dict:
    if not session_id:
        return asdict(
            error_response(
                "session_id is required for action 'delete'",
                error_code=ErrorCode.MISSING_REQUIRED,
                error_type=ErrorType.VALIDATION,
                remediation="Pass the session_id returned by a failed deep_research call",
            )
        )
    try:
        deleted = store.delete(session_id)
    except (InvalidSessionIdError, LockAcquisitionError) as exc:
        return error_to_response(exc)

    if not deleted:
        return asdict(
            error_response(
                f"No checkpoint found for session {session_id}",
                error_code=ErrorCode.NOT_FOUND,
                error_type=ErrorType.NOT_FOUND,
            )
        )
    logger.info("Deleted checkpoint %s", session_id)
    return asdict(success_response(session_id=session_id, deleted=True))


def register_checkpoint_tools(mcp: FastMCP, config: ServerConfig, store: CheckpointStore) -> None:
    """Register the research_checkpoints tool.

    Args:
        mcp: FastMCP server instance
        config: Server configuration
        store: Checkpoint store shared with the research workflow
    """

    @mcp.tool(name="research_checkpoints")
    def research_checkpoints(
        action: Literal["list", "delete"] = "list",
        session_id: Optional[str] = None,
    ) -> dict:
        """
        List or delete checkpoints of interrupted deep research sessions.

        WHEN TO USE:
        - Find the session_id of a run that failed, to resume it
        - Discard a session that will not be resumed

        Args:
            action: "list" or "delete"
            session_id: Session to delete (required for "delete")

        Returns:
            Standard response envelope; "list" returns sessions newest first
        """
        if action == "delete":
            return delete_checkpoint(store, session_id)
        return list_checkpoints(store)
