"""Unified error hierarchy for research-mcp.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    # Import from domain modules for specificity
    from research_mcp.core.errors.llm import LLMError, RateLimitError

    # Or import from the package with qualified aliases for disambiguation
    from research_mcp.core.errors import LLMRateLimitError, SearchRateLimitError
"""

from research_mcp.core.errors.base import ERROR_MAPPINGS, error_to_response

# --- Completion errors ---
from research_mcp.core.errors.llm import (
    AuthenticationError as LLMAuthenticationError,
)
from research_mcp.core.errors.llm import (
    InvalidRequestError,
    LLMError,
    ProviderNotConfiguredError,
)
from research_mcp.core.errors.llm import (
    RateLimitError as LLMRateLimitError,
)

# --- Research pipeline errors ---
from research_mcp.core.errors.research import (
    BrowserUnavailableError,
    CheckpointNotFoundError,
    ResumeError,
    TopicMismatchError,
)

# --- Search errors ---
from research_mcp.core.errors.search import (
    AuthenticationError as SearchAuthenticationError,
)
from research_mcp.core.errors.search import (
    RateLimitError as SearchRateLimitError,
)
from research_mcp.core.errors.search import SearchProviderError

# --- Storage errors ---
from research_mcp.core.errors.storage import (
    InvalidSessionIdError,
    LockAcquisitionError,
)

__all__ = [
    "ERROR_MAPPINGS",
    "error_to_response",
    "LLMError",
    "LLMRateLimitError",
    "LLMAuthenticationError",
    "InvalidRequestError",
    "ProviderNotConfiguredError",
    "ResumeError",
    "CheckpointNotFoundError",
    "TopicMismatchError",
    "BrowserUnavailableError",
    "SearchProviderError",
    "SearchRateLimitError",
    "SearchAuthenticationError",
    "InvalidSessionIdError",
    "LockAcquisitionError",
]
