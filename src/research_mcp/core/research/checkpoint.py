"""File-based checkpoint store for research sessions.

One JSON document per session id, written with:
- Atomic writes (temp+fsync+rename)
- Per-session file locking with timeout

``load`` never raises for an unusable record: a missing file, malformed JSON,
a record that fails validation, and a record written under another schema
version all come back as ``None``.
"""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout

from research_mcp.core.errors.storage import InvalidSessionIdError, LockAcquisitionError
from research_mcp.core.research.models.session import (
    CHECKPOINT_SCHEMA_VERSION,
    CheckpointSummary,
    ResearchSession,
)

logger = logging.getLogger(__name__)

# Lock acquisition timeout (seconds)
LOCK_ACQUISITION_TIMEOUT = 5

_SESSION_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_session_id(session_id: str) -> bool:
    return bool(_SESSION_ID_PATTERN.match(session_id or ""))


def validate_session_id(session_id: str) -> str:
    """Return ``session_id`` unchanged if it is a canonical UUID.

    Raises:
        InvalidSessionIdError: If the id is malformed
    """
    if not is_valid_session_id(session_id):
        raise InvalidSessionIdError(session_id)
    return session_id


class CheckpointStore:
    """Durable per-session checkpoint storage."""

    def __init__(self, storage_path: Path) -> None:
        self.storage_path = storage_path

    def _ensure_directory(self) -> None:
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _get_session_path(self, session_id: str) -> Path:
        return self.storage_path / f"{validate_session_id(session_id)}.json"

    def _get_lock_path(self, session_id: str) -> Path:
        return self.storage_path / f"{validate_session_id(session_id)}.json.lock"

    def exists(self, session_id: str) -> bool:
        return self._get_session_path(session_id).exists()

    def save(self, session: ResearchSession) -> None:
        """Overwrite the checkpoint for ``session`` and stamp ``updated_at``.

        Args:
            session: Session state to save

        Raises:
            InvalidSessionIdError: If the session id is malformed
            LockAcquisitionError: If the lock cannot be acquired in time
        """
        session_path = self._get_session_path(session.session_id)
        lock_path = self._get_lock_path(session.session_id)
        self._ensure_directory()

        session.touch()
        data = session.model_dump(mode="json")

        try:
            with FileLock(lock_path, timeout=LOCK_ACQUISITION_TIMEOUT):
                fd, temp_path = tempfile.mkstemp(
                    dir=self.storage_path,
                    prefix=f".{session.session_id}.",
                    suffix=".tmp",
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        json.dump(data, f, indent=2, ensure_ascii=False)
                        f.flush()
                        os.fsync(f.fileno())

                    os.replace(temp_path, session_path)
                    logger.debug(
                        "Saved checkpoint %s at step %d",
                        session.session_id,
                        session.last_completed_step,
                    )
                except Exception:
                    try:
                        os.unlink(temp_path)
                    except OSError:
                        pass
                    raise
        except Timeout as exc:
            raise LockAcquisitionError(
                f"Timed out acquiring checkpoint lock for session {session.session_id}"
            ) from exc

    def load(self, session_id: str) -> Optional[ResearchSession]:
        """Load a checkpoint.

        Args:
            session_id: Session identifier

        Returns:
            The stored session, or None if missing, corrupt, or from another
            schema version

        Raises:
            InvalidSessionIdError: If the session id is malformed
            LockAcquisitionError: If the lock cannot be acquired in time
        """
        session_path = self._get_session_path(session_id)
        if not session_path.exists():
            return None

        try:
            with FileLock(self._get_lock_path(session_id), timeout=LOCK_ACQUISITION_TIMEOUT):
                if not session_path.exists():
                    return None
                raw = session_path.read_text(encoding="utf-8")
        except Timeout as exc:
            raise LockAcquisitionError(
                f"Timed out acquiring checkpoint lock for session {session_id}"
            ) from exc
        except OSError as exc:
            logger.warning("Failed to read checkpoint %s: %s", session_id, exc)
            return None

        return self._parse(session_id, raw)

    def _parse(self, session_id: str, raw: str) -> Optional[ResearchSession]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Checkpoint %s is not valid JSON: %s", session_id, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Checkpoint %s is not a JSON object", session_id)
            return None

        version = data.get("version")
        if version != CHECKPOINT_SCHEMA_VERSION:
            logger.warning(
                "Checkpoint %s has schema version %r, expected %d; ignoring",
                session_id,
                version,
                CHECKPOINT_SCHEMA_VERSION,
            )
            return None

        try:
            return ResearchSession.model_validate(data)
        except ValueError as exc:
            logger.warning("Checkpoint %s failed validation: %s", session_id, exc)
            return None

    def delete(self, session_id: str) -> bool:
        """Delete a checkpoint.

        Args:
            session_id: Session identifier

        Returns:
            True if deleted, False if there was nothing to delete
        """
        session_path = self._get_session_path(session_id)
        lock_path = self._get_lock_path(session_id)

        if not session_path.exists():
            return False

        try:
            with FileLock(lock_path, timeout=LOCK_ACQUISITION_TIMEOUT):
                session_path.unlink()
        except FileNotFoundError:
            return False
        except Timeout as exc:
            raise LockAcquisitionError(
                f"Timed out acquiring checkpoint lock for session {session_id}"
            ) from exc

        try:
            lock_path.unlink()
        except OSError:
            pass  # May still be in use or already gone

        logger.debug("Deleted checkpoint %s", session_id)
        return True

    def list_sessions(self) -> List[CheckpointSummary]:
        """List usable checkpoints, most recently updated first."""
        if not self.storage_path.exists():
            return []

        summaries: List[CheckpointSummary] = []
        for path in self.storage_path.glob("*.json"):
            session_id = path.stem
            if not is_valid_session_id(session_id):
                continue
            try:
                raw = path.read_text(encoding="utf-8")
            except OSError as exc:
                logger.warning("Failed to read checkpoint %s: %s", path, exc)
                continue
            session = self._parse(session_id, raw)
            if session is not None:
                summaries.append(CheckpointSummary.from_session(session))

        summaries.sort(key=lambda s: s.updated_at, reverse=True)
        return summaries
