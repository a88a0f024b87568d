"""Error-to-ErrorCode mapping registry.

Provides a centralized mapping from exception types to (ErrorCode, ErrorType) tuples,
enabling consistent error response generation across the envelope-returning tools.

Usage:
    from research_mcp.core.errors.base import error_to_response

    try:
        do_something()
    except Exception as e:
        result = error_to_response(e)
        if result is not None:
            return result
        raise  # Unknown error, re-raise
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

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
from research_mcp.core.errors.research import (
    BrowserUnavailableError,
    CheckpointNotFoundError,
    TopicMismatchError,
)
from research_mcp.core.errors.search import (
    AuthenticationError as SearchAuthenticationError,
)
from research_mcp.core.errors.search import (
    RateLimitError as SearchRateLimitError,
)
from research_mcp.core.errors.search import (
    SearchProviderError,
)
from research_mcp.core.errors.storage import (
    InvalidSessionIdError,
    LockAcquisitionError,
)
from research_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
)

ERROR_MAPPINGS: Dict[Type[Exception], Tuple[ErrorCode, ErrorType]] = {
    # --- Completion errors ---
    LLMError: (ErrorCode.AI_PROVIDER_ERROR, ErrorType.AI_PROVIDER),
    LLMRateLimitError: (ErrorCode.RATE_LIMIT_EXCEEDED, ErrorType.RATE_LIMIT),
    LLMAuthenticationError: (ErrorCode.UNAUTHORIZED, ErrorType.AUTHENTICATION),
    InvalidRequestError: (ErrorCode.VALIDATION_ERROR, ErrorType.VALIDATION),
    ProviderNotConfiguredError: (ErrorCode.AI_NO_PROVIDER, ErrorType.FEATURE_FLAG),
    # --- Search provider errors ---
    SearchProviderError: (ErrorCode.SEARCH_PROVIDER_ERROR, ErrorType.AI_PROVIDER),
    SearchRateLimitError: (ErrorCode.RATE_LIMIT_EXCEEDED, ErrorType.RATE_LIMIT),
    SearchAuthenticationError: (ErrorCode.UNAUTHORIZED, ErrorType.AUTHENTICATION),
    # --- Checkpoint errors ---
    InvalidSessionIdError: (ErrorCode.INVALID_FORMAT, ErrorType.VALIDATION),
    LockAcquisitionError: (ErrorCode.UNAVAILABLE, ErrorType.UNAVAILABLE),
    CheckpointNotFoundError: (ErrorCode.NOT_FOUND, ErrorType.NOT_FOUND),
    TopicMismatchError: (ErrorCode.CONFLICT, ErrorType.CONFLICT),
    # --- Browser errors ---
    BrowserUnavailableError: (ErrorCode.UNAVAILABLE, ErrorType.UNAVAILABLE),
}


def error_to_response(exc: Exception) -> Optional[dict]:
    """Convert a known exception to a standard error_response dict, or None if unknown.

    Looks up the exception's *exact* type in ERROR_MAPPINGS and, if found,
    generates a standardized error response using the mapped ErrorCode and ErrorType.

    Args:
        exc: The exception to convert.

    Returns:
        A dict suitable for MCP tool response, or None if the exception type
        is not registered in ERROR_MAPPINGS.
    """
    mapping = ERROR_MAPPINGS.get(type(exc))
    if mapping is None:
        return None

    from dataclasses import asdict

    from research_mcp.core.responses.builders import error_response

    code, error_type = mapping
    return asdict(error_response(str(exc), error_code=code, error_type=error_type))
