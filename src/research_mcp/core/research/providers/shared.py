"""Shared helpers for search provider implementations."""

import re
from typing import Optional

import httpx

_SECRET_PATTERN = re.compile(r"(tvly-|sk-)[A-Za-z0-9_\-]{6,}")


def redact_secrets(text: str) -> str:
    """Mask API-key-looking tokens in provider error text."""
    return _SECRET_PATTERN.sub(lambda m: f"{m.group(1)}***", text)


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse the ``Retry-After`` header from an HTTP response.

    Handles numeric values only; date-based values return ``None``.
    """
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass
    return None


def extract_error_message(response: httpx.Response) -> str:
    """Extract and redact an error message from an HTTP error response.

    Tries the ``{"error": ...}`` / ``{"detail": ...}`` / ``{"message": ...}``
    JSON shapes before falling back to the raw body.
    """
    try:
        data = response.json()
    except ValueError:
        text = response.text[:200] if response.text else "Unknown error"
        return redact_secrets(text)

    msg: object
    if isinstance(data, dict):
        error_field = data.get("error") or data.get("detail")
        if isinstance(error_field, dict):
            msg = error_field.get("message", str(error_field))
        elif isinstance(error_field, str):
            msg = error_field
        else:
            msg = data.get("message", response.text[:200])
    else:
        msg = response.text[:200]
    return redact_secrets(str(msg))
