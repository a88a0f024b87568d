"""Collaborators the deep research workflow runs against."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from research_mcp.core.providers.base import CompletionProvider
from research_mcp.core.research.archive import ResearchArchive
from research_mcp.core.research.browser import BrowserService
from research_mcp.core.research.checkpoint import CheckpointStore
from research_mcp.core.research.content_extractor import ContentExtractor
from research_mcp.core.research.providers.base import SearchProvider


@dataclass
class ResearchServices:
    """Built once by the server and handed to every workflow run.

    ``browser`` only needs ``open_page()``; tests substitute an in-memory
    page source.
    """

    completion: CompletionProvider
    search: SearchProvider
    browser: BrowserService
    checkpoints: CheckpointStore
    extractor: ContentExtractor = field(default_factory=ContentExtractor)
    archive: Optional[ResearchArchive] = None
