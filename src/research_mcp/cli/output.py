"""JSON envelope output for CLI commands.

Commands print exactly one response envelope to stdout, so their output is
machine-readable the same way MCP tool responses are.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, Optional

import click

from research_mcp.core.responses import ErrorCode, ErrorType, error_response, success_response


def _emit(payload: Mapping[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


def emit_success(data: Optional[Mapping[str, Any]] = None, **fields: Any) -> None:
    _emit(asdict(success_response(data, **fields)))


def emit_error(
    message: str,
    *,
    code: ErrorCode | str = ErrorCode.INTERNAL_ERROR,
    error_type: ErrorType | str = ErrorType.INTERNAL,
    remediation: Optional[str] = None,
    exit_code: int = 1,
) -> None:
    """Print an error envelope and exit with ``exit_code``."""
    _emit(
        asdict(
            error_response(
                message,
                error_code=code,
                error_type=error_type,
                remediation=remediation,
            )
        )
    )
    sys.exit(exit_code)
