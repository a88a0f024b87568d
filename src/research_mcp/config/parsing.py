"""Parsing and normalization helpers for configuration values.

Provides boolean/number parsing and provider-name normalization used by
the other config sub-modules.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

_VALID_LLM_PROVIDERS = {"openai", "anthropic"}
_VALID_SEARCH_PROVIDERS = {"duckduckgo", "tavily"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _try_parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"true", "1", "yes", "on"}:
        return True
    if normalized in {"false", "0", "no", "off"}:
        return False
    return None


def _try_parse_int(value: Any, *, name: str) -> Optional[int]:
    """Parse an integer setting, logging and returning None when malformed."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer value for %s: %r", name, value)
        return None


def _try_parse_float(value: Any, *, name: str) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric value for %s: %r", name, value)
        return None


def _normalize_llm_provider(value: Optional[str]) -> Optional[str]:
    """Normalize an LLM provider name.

    Unknown names disable the completion backend instead of failing startup,
    so the browsing tools stay available.

    Args:
        value: Raw provider name from TOML or environment

    Returns:
        Lower-cased provider name, or None if unset or unknown
    """
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized not in _VALID_LLM_PROVIDERS:
        logger.warning(
            "Unknown LLM provider '%s'; deep research disabled. Valid options: %s",
            value,
            ", ".join(sorted(_VALID_LLM_PROVIDERS)),
        )
        return None
    return normalized


def _normalize_search_provider(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in _VALID_SEARCH_PROVIDERS:
        logger.warning(
            "Invalid search provider '%s'. Falling back to 'duckduckgo'. Valid options: %s",
            value,
            ", ".join(sorted(_VALID_SEARCH_PROVIDERS)),
        )
        return "duckduckgo"
    return normalized
