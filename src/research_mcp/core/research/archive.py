"""Archival copies of research sources and reports.

Writes under ``<archive_dir>/<session_id>/``:
    sources/<sha256(url)[:16]>.md   one file per extracted page
    report.md                       the final report

Archive writes are best effort and never read back; failures are logged.
"""

import hashlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from research_mcp.core.research.models.session import ResearchSession

logger = logging.getLogger(__name__)


def url_digest(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]


class ResearchArchive:
    """Derived, non-critical-path artifacts for a research session."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def session_dir(self, session_id: str) -> Path:
        return self.root / session_id

    def save_source(
        self,
        session_id: str,
        url: str,
        title: str,
        content: str,
        fetched_at: Optional[datetime] = None,
    ) -> Optional[Path]:
        fetched_at = fetched_at or datetime.now(timezone.utc)
        path = self.session_dir(session_id) / "sources" / f"{url_digest(url)}.md"
        header = (
            f"<!-- url: {url} -->\n"
            f"<!-- title: {title} -->\n"
            f"<!-- fetched_at: {fetched_at.isoformat()} -->\n\n"
        )
        return self._write(path, header + content)

    def save_report(self, session: ResearchSession, report: str, source_count: int) -> Optional[Path]:
        path = self.session_dir(session.session_id) / "report.md"
        header = (
            "---\n"
            f'topic: "{session.topic}"\n'
            f"depth: {session.depth.value}\n"
            f"session_id: {session.session_id}\n"
            f"created_at: {session.created_at.isoformat()}\n"
            f"sources: {source_count}\n"
            "---\n\n"
        )
        return self._write(path, header + report)

    def _write(self, path: Path, text: str) -> Optional[Path]:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to write archive file %s: %s", path, exc)
            return None
        logger.debug("Archived %s", path)
        return path
