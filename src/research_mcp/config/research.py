"""Research engine configuration.

Contains ResearchConfig, the configuration dataclass for the deep research
pipeline and the collaborators it drives (completion backend, search
backend, headless browser, checkpoint and archive storage).
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from research_mcp.config.parsing import (
    _normalize_llm_provider,
    _normalize_search_provider,
    _parse_bool,
)

logger = logging.getLogger(__name__)

DEFAULT_CHECKPOINT_DIRNAME = "research-agent-checkpoints"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

_DEFAULT_LLM_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
}
_DEFAULT_LLM_MODELS = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-5",
}


@dataclass
class ResearchConfig:
    """Configuration for the deep research engine.

    Attributes:
        enabled: Master switch for the deep_research tool
        checkpoint_dir: Directory holding one JSON checkpoint per session
            (default: <system tmp>/research-agent-checkpoints)
        archive_dir: Optional directory for archived sources and reports
        llm_provider: Completion backend ("openai" or "anthropic"); None disables deep research
        llm_base_url: Base URL of the completion API (per-provider default when unset)
        llm_api_key: API key for the completion backend
        llm_model: Model name (per-provider default when unset)
        llm_max_tokens: Maximum tokens per completion
        llm_timeout: Timeout in seconds for a single completion call
        search_provider: Search backend ("duckduckgo" or "tavily")
        search_timeout: Timeout in seconds for a single search call
        tavily_api_key: API key for Tavily (reads TAVILY_API_KEY env var)
        browser_headless: Launch chromium headless
        browser_user_agent: User agent of the shared browsing context
        navigation_timeout: Page navigation timeout in seconds
    """

    enabled: bool = True
    checkpoint_dir: Optional[Path] = None
    archive_dir: Optional[Path] = None
    llm_provider: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None
    llm_max_tokens: int = 4096
    llm_timeout: float = 120.0
    search_provider: str = "duckduckgo"
    search_timeout: float = 30.0
    tavily_api_key: Optional[str] = None
    browser_headless: bool = True
    browser_user_agent: str = DEFAULT_USER_AGENT
    navigation_timeout: float = 30.0

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "ResearchConfig":
        """Create config from TOML dict (typically [research] section).

        Args:
            data: Dict from TOML parsing

        Returns:
            ResearchConfig instance
        """
        checkpoint_dir = data.get("checkpoint_dir")
        archive_dir = data.get("archive_dir")
        return cls(
            enabled=_parse_bool(data.get("enabled", True)),
            checkpoint_dir=Path(checkpoint_dir) if checkpoint_dir else None,
            archive_dir=Path(archive_dir) if archive_dir else None,
            llm_provider=_normalize_llm_provider(data.get("llm_provider")),
            llm_base_url=data.get("llm_base_url"),
            llm_api_key=data.get("llm_api_key"),
            llm_model=data.get("llm_model"),
            llm_max_tokens=int(data.get("llm_max_tokens", 4096)),
            llm_timeout=float(data.get("llm_timeout", 120.0)),
            search_provider=_normalize_search_provider(
                str(data.get("search_provider", "duckduckgo"))
            ),
            search_timeout=float(data.get("search_timeout", 30.0)),
            tavily_api_key=data.get("tavily_api_key"),
            browser_headless=_parse_bool(data.get("browser_headless", True)),
            browser_user_agent=data.get("browser_user_agent", DEFAULT_USER_AGENT),
            navigation_timeout=float(data.get("navigation_timeout", 30.0)),
        )

    def __post_init__(self) -> None:
        """Validate configuration fields after initialization."""
        if self.llm_max_tokens < 1:
            raise ValueError(
                f"Invalid llm_max_tokens: {self.llm_max_tokens}. Must be a positive integer."
            )
        for name in ("llm_timeout", "search_timeout", "navigation_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Invalid {name}: {getattr(self, name)}. Must be > 0.")

    @property
    def llm_configured(self) -> bool:
        """Whether a completion backend is selected."""
        return self.enabled and self.llm_provider is not None

    def get_checkpoint_dir(self) -> Path:
        """Get the resolved checkpoint directory.

        Returns:
            Configured checkpoint_dir, or the default under the system temp dir
        """
        if self.checkpoint_dir is not None:
            return self.checkpoint_dir.expanduser()
        return Path(tempfile.gettempdir()) / DEFAULT_CHECKPOINT_DIRNAME

    def get_archive_dir(self) -> Optional[Path]:
        if self.archive_dir is None:
            return None
        return self.archive_dir.expanduser()

    def get_llm_base_url(self) -> str:
        if self.llm_base_url:
            return self.llm_base_url
        return _DEFAULT_LLM_BASE_URLS.get(self.llm_provider or "openai", _DEFAULT_LLM_BASE_URLS["openai"])

    def get_llm_model(self) -> str:
        if self.llm_model:
            return self.llm_model
        return _DEFAULT_LLM_MODELS.get(self.llm_provider or "openai", _DEFAULT_LLM_MODELS["openai"])
