"""Defensive decoding of model replies.

Models wrap JSON in prose or code fences, truncate it, or skip it entirely.
:func:`parse_model_json` never raises: it returns ``Parsed`` with the first
JSON object found in the text, or ``Unparseable`` saying why not.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from eventdrop.core.errors import ParseFailure

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class Parsed:
    payload: dict[str, Any]


@dataclass(frozen=True)
class Unparseable:
    reason: str
    raw: str = ""


ParseResult = Union[Parsed, Unparseable]


def parse_model_json(content: Any) -> ParseResult:
    if not isinstance(content, str) or not content.strip():
        return Unparseable(reason="empty response")
    try:
        return Parsed(payload=first_json_object(content))
    except ParseFailure as exc:
        return Unparseable(reason=exc.message, raw=_truncate(content))


def first_json_object(text: str) -> dict[str, Any]:
    """Return the first balanced JSON object embedded in ``text``."""
    start = text.find("{")
    if start == -1:
        raise ParseFailure("no JSON object in response")

    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)

    raise ParseFailure("malformed JSON object in response")


def _truncate(text: str, limit: int = 200) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
