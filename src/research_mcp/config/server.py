"""ServerConfig dataclass and global configuration state.

This module defines the ``ServerConfig`` class (field declarations and simple
accessor methods) and the global ``get_config`` / ``set_config`` helpers.
Loading logic lives in the ``_ServerConfigLoader`` mixin (``loader.py``)
which ``ServerConfig`` inherits from.
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from typing import Optional

from research_mcp.config.loader import _ServerConfigLoader
from research_mcp.config.research import ResearchConfig


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("research-mcp")
    except PackageNotFoundError:
        return "0.1.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()


class _JsonLineFormatter(logging.Formatter):
    """One JSON object per record; keeps multi-line messages parseable."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


@dataclass
class ServerConfig(_ServerConfigLoader):
    """Server configuration with support for env vars and TOML overrides."""

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    # Server configuration
    server_name: str = "research-mcp"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    # Research engine configuration
    research: ResearchConfig = field(default_factory=ResearchConfig)

    def setup_logging(self) -> None:
        """Configure logging based on settings.

        Logs go to stderr; stdout carries the MCP stdio transport.
        """
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            formatter: logging.Formatter = _JsonLineFormatter()
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("research_mcp")
        root_logger.setLevel(level)
        for existing in list(root_logger.handlers):
            root_logger.removeHandler(existing)
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: ServerConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
