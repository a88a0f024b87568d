"""Configuration package for research-mcp.

Sub-modules:
    parsing    – Boolean/number parsing and provider-name normalization
    research   – ResearchConfig dataclass
    server     – ServerConfig dataclass, get_config/set_config globals
    loader     – ServerConfig loading mixin (_ServerConfigLoader)
"""

from research_mcp.config.research import ResearchConfig
from research_mcp.config.server import (
    _PACKAGE_VERSION,
    ServerConfig,
    get_config,
    set_config,
)

__all__ = [
    "_PACKAGE_VERSION",
    "ResearchConfig",
    "ServerConfig",
    "get_config",
    "set_config",
]
