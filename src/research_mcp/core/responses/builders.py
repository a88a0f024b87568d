"""
Response builder functions for MCP tool operations.

Provides success_response() and error_response(), the two constructors
for standardized ToolResponse objects.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from research_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
    ToolResponse,
)


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Create a standardized success response.

    Args:
        data: Optional mapping used as the base payload.
        **fields: Additional payload fields (shorthand for ``data.update``).
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)

    return ToolResponse(success=True, data=payload, error=None)


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
) -> ToolResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable description of the failure.
        data: Optional mapping with additional machine-readable context.
        error_code: Canonical error code (``ErrorCode`` enum or string).
        error_type: Error category for routing (``ErrorType`` enum or string).
        remediation: User-facing guidance on how to fix the issue.

    Example:
        >>> error_response(
        ...     "Invalid session id: 'abc'",
        ...     error_code=ErrorCode.INVALID_FORMAT,
        ...     error_type=ErrorType.VALIDATION,
        ...     remediation="Pass the UUID printed at the end of a research report",
        ... )
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    effective_error_code: Union[ErrorCode, str] = error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    effective_error_type: Union[ErrorType, str] = error_type if error_type is not None else ErrorType.INTERNAL

    if "error_code" not in payload:
        payload["error_code"] = (
            effective_error_code.value if isinstance(effective_error_code, Enum) else effective_error_code
        )
    if "error_type" not in payload:
        payload["error_type"] = (
            effective_error_type.value if isinstance(effective_error_type, Enum) else effective_error_type
        )
    if remediation is not None and "remediation" not in payload:
        payload["remediation"] = remediation

    return ToolResponse(success=False, data=payload, error=message)
