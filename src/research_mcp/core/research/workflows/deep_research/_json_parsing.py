"""Parsing of unstructured model replies.

Model output is never trusted to be valid JSON. ``parse_json`` returns a
tagged result instead of raising, so each caller decides its own fallback.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Union

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


@dataclass(frozen=True)
class Parsed:
    """The reply decoded to a JSON value."""

    value: Any


@dataclass(frozen=True)
class Fallback:
    """The reply could not be decoded; ``raw_text`` is the original reply."""

    raw_text: str


ParseResult = Union[Parsed, Fallback]


def strip_code_fence(text: str) -> str:
    """Return the body of the first fenced code block, or ``text`` stripped."""
    match = _FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_json(text: str) -> ParseResult:
    """Decode a model reply that may be wrapped in a markdown code fence."""
    try:
        return Parsed(json.loads(strip_code_fence(text)))
    except (json.JSONDecodeError, TypeError):
        return Fallback(text)


def parse_string_list(text: str) -> list[str] | None:
    """Decode a reply expected to be a JSON array of strings.

    Non-string and blank entries are dropped.

    Returns:
        The strings, or None when the reply is not a JSON array
    """
    result = parse_json(text)
    if not isinstance(result, Parsed) or not isinstance(result.value, list):
        return None
    return [item.strip() for item in result.value if isinstance(item, str) and item.strip()]
