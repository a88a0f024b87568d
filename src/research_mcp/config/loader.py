"""ServerConfig loading logic.

Provides ``_ServerConfigLoader``, a mixin class whose methods are inherited by
``ServerConfig`` (defined in ``server.py``).  Splitting loading logic into its
own module keeps ``server.py`` focused on field definitions and simple
accessor methods.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, cast

if TYPE_CHECKING:
    from research_mcp.config.server import ServerConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from research_mcp.config.parsing import (
    _normalize_llm_provider,
    _normalize_search_provider,
    _try_parse_bool,
    _try_parse_float,
    _try_parse_int,
)
from research_mcp.config.research import ResearchConfig

logger = logging.getLogger(__name__)


class _ServerConfigLoader:
    """Mixin providing config-loading methods for ``ServerConfig``.

    At runtime ``self`` is always a ``ServerConfig`` instance.
    """

    if TYPE_CHECKING:

        def __init_subclass__(cls, **kwargs: Any) -> None: ...

        log_level: str
        structured_logging: bool
        server_name: str
        server_version: str
        research: ResearchConfig

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./research-mcp.toml)
        3. User TOML config (~/.research-mcp.toml)
        4. XDG config (~/.config/research-mcp/config.toml)
        5. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("RESEARCH_MCP_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "research-mcp" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug("Loaded XDG config from %s", xdg_config)

            home_config = Path.home() / ".research-mcp.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug("Loaded user config from %s", home_config)

            project_config = Path("research-mcp.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug("Loaded project config from %s", project_config)

        config._load_env()

        return cast("ServerConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if "logging" in data:
                log = data["logging"]
                if "level" in log:
                    self.log_level = log["level"].upper()
                if "structured" in log:
                    self.structured_logging = log["structured"]

            if "server" in data:
                srv = data["server"]
                if "name" in srv:
                    self.server_name = srv["name"]
                if "version" in srv:
                    self.server_version = srv["version"]

            if "research" in data:
                self.research = ResearchConfig.from_toml_dict(data["research"])

        except (tomllib.TOMLDecodeError, OSError, ValueError) as e:
            logger.error("Error loading config file %s: %s", path, e)

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if level := os.environ.get("RESEARCH_MCP_LOG_LEVEL"):
            self.log_level = level.upper()
        if structured := os.environ.get("RESEARCH_MCP_STRUCTURED_LOGGING"):
            parsed = _try_parse_bool(structured)
            if parsed is not None:
                self.structured_logging = parsed

        research = self.research

        if checkpoint_dir := os.environ.get("CHECKPOINT_DIR"):
            research.checkpoint_dir = Path(checkpoint_dir)
        if archive_dir := os.environ.get("RESEARCH_ARCHIVE_DIR"):
            research.archive_dir = Path(archive_dir)

        # Completion backend (standard names, no RESEARCH_MCP_ prefix)
        if "LLM_PROVIDER" in os.environ:
            research.llm_provider = _normalize_llm_provider(os.environ["LLM_PROVIDER"])
        if api_key := os.environ.get("LLM_API_KEY"):
            research.llm_api_key = api_key
        if base_url := os.environ.get("LLM_BASE_URL"):
            research.llm_base_url = base_url
        if model := os.environ.get("LLM_MODEL"):
            research.llm_model = model
        if max_tokens := os.environ.get("LLM_MAX_TOKENS"):
            parsed_int = _try_parse_int(max_tokens, name="LLM_MAX_TOKENS")
            if parsed_int is not None and parsed_int > 0:
                research.llm_max_tokens = parsed_int
        if llm_timeout := os.environ.get("LLM_TIMEOUT"):
            parsed_float = _try_parse_float(llm_timeout, name="LLM_TIMEOUT")
            if parsed_float is not None and parsed_float > 0:
                research.llm_timeout = parsed_float

        # Search backend
        if search_provider := os.environ.get("SEARCH_PROVIDER"):
            research.search_provider = _normalize_search_provider(search_provider)
        if tavily_key := os.environ.get("TAVILY_API_KEY"):
            research.tavily_api_key = tavily_key

        # Browser
        if headless := os.environ.get("BROWSER_HEADLESS"):
            parsed = _try_parse_bool(headless)
            if parsed is not None:
                research.browser_headless = parsed
        if user_agent := os.environ.get("BROWSER_USER_AGENT"):
            research.browser_user_agent = user_agent
