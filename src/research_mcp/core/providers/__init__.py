"""Completion provider backends and factory."""

import logging
from typing import Optional

from research_mcp.config.research import ResearchConfig
from research_mcp.core.providers.anthropic import AnthropicProvider
from research_mcp.core.providers.base import (
    CompletionProvider,
    CompletionResponse,
    TokenUsage,
)
from research_mcp.core.providers.openai_compat import OpenAICompatibleProvider

logger = logging.getLogger(__name__)


def create_completion_provider(config: ResearchConfig) -> Optional[CompletionProvider]:
    """Build the configured completion backend.

    Args:
        config: Research configuration

    Returns:
        A provider instance, or None when no backend is configured
    """
    if not config.llm_configured:
        return None

    common = dict(
        api_key=config.llm_api_key,
        base_url=config.get_llm_base_url(),
        model=config.get_llm_model(),
        max_tokens=config.llm_max_tokens,
        timeout=config.llm_timeout,
    )
    if config.llm_provider == "anthropic":
        return AnthropicProvider(**common)
    return OpenAICompatibleProvider(**common)


__all__ = [
    "AnthropicProvider",
    "CompletionProvider",
    "CompletionResponse",
    "OpenAICompatibleProvider",
    "TokenUsage",
    "create_completion_provider",
]
