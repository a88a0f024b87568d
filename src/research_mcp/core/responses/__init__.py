"""Standard response envelopes for MCP tools."""

from research_mcp.core.responses.builders import error_response, success_response
from research_mcp.core.responses.types import ErrorCode, ErrorType, ToolResponse

__all__ = [
    "ErrorCode",
    "ErrorType",
    "ToolResponse",
    "error_response",
    "success_response",
]
