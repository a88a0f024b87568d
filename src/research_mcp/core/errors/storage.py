"""Checkpoint storage error classes."""


class InvalidSessionIdError(ValueError):
    """Raised when a session id is not a canonical UUID.

    Distinct from "checkpoint not found": the id was rejected before any
    storage access.
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Invalid session id: {session_id!r}")


class LockAcquisitionError(Exception):
    """Raised when a checkpoint file lock cannot be acquired within timeout."""

    pass
