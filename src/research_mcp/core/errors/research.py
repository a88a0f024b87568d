"""Research pipeline error classes.

Resume rejections are user-facing: the orchestrator turns them into failure
results instead of letting them escape.
"""


class ResumeError(Exception):
    """Base exception for a rejected resume request."""

    def __init__(self, session_id: str, message: str) -> None:
        self.session_id = session_id
        super().__init__(message)


class CheckpointNotFoundError(ResumeError):
    """No usable checkpoint exists (missing, corrupt, or from another schema version)."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            session_id,
            f"No valid checkpoint found for session {session_id}. "
            "Start a fresh research session without a sessionId.",
        )


class TopicMismatchError(ResumeError):
    """The resume request names a different topic than the stored checkpoint."""

    def __init__(self, session_id: str, stored_topic: str, requested_topic: str) -> None:
        self.stored_topic = stored_topic
        self.requested_topic = requested_topic
        super().__init__(
            session_id,
            f'Topic mismatch: checkpoint has "{stored_topic}" but request has '
            f'"{requested_topic}". Use the original topic or start a new session.',
        )


class BrowserUnavailableError(Exception):
    """Raised when the headless browser cannot be launched."""

    pass
