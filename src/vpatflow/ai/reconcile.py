"""Recover JSON arrays from AI replies and align them with the request batch.

Providers are unreliable in predictable ways: replies arrive wrapped in
markdown fences, padded with prose, cut off mid-array when the output token
budget runs out, reordered, or missing the identity field. ``parse_ai_json``
turns such a reply into a list of items, and ``align_responses`` maps those
items back onto the request batch so there is exactly one result per request,
in request order.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Mapping, Sequence, TypeVar

from vpatflow.errors import ResponseParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LEADING_FENCE_RE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?```\s*$")
_JSON_SPAN_RE = re.compile(r"\[[\s\S]*\]|\{[\s\S]*\}")
_ARRAY_START_RE = re.compile(r"\[[\s\S]*")
_TRAILING_PARTIAL_OBJECT_RE = re.compile(r",\s*\{[^}]*$")

_decoder = json.JSONDecoder()


def strip_code_fence(text: str) -> str:
    """Remove one leading and one trailing markdown code fence, if present."""

    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned
    cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def _as_list(parsed: Any) -> list[Any]:
    return parsed if isinstance(parsed, list) else [parsed]


def _salvage_array_items(fragment: str) -> list[Any] | None:
    """Decode complete leading elements of a possibly truncated JSON array."""

    position = fragment.find("[")
    if position < 0:
        return None
    position += 1

    items: list[Any] = []
    length = len(fragment)
    while True:
        while position < length and fragment[position] in " \t\r\n,":
            position += 1
        if position >= length or fragment[position] == "]":
            break
        try:
            item, position = _decoder.raw_decode(fragment, position)
        except ValueError:
            break
        items.append(item)

    return items or None


def _repair_truncated_array(fragment: str) -> list[Any] | None:
    fixed = fragment.strip()
    if not fixed.endswith("]"):
        logger.debug("JSON array not properly closed, attempting to fix")
        fixed = _TRAILING_PARTIAL_OBJECT_RE.sub("", fixed)
        if not fixed.endswith("]"):
            fixed += "]"
        try:
            return _as_list(json.loads(fixed))
        except ValueError as exc:
            logger.debug("Closing the array did not help: %s", exc)

    return _salvage_array_items(fragment)


def parse_ai_json(raw_text: str) -> list[Any]:
    """Parse an AI reply into a list of items.

    Tries, in order: the reply without its code fence, the first bracketed or
    braced span, and finally a repair of a truncated array that keeps every
    complete element. Raises ``ResponseParseError`` when nothing parses.
    """
    content = strip_code_fence(raw_text or "")

    try:
        return _as_list(json.loads(content))
    except ValueError as exc:
        first_error = exc
        logger.debug("Direct JSON parse failed: %s", exc)

    span = _JSON_SPAN_RE.search(content)
    if span is not None:
        try:
            items = _as_list(json.loads(span.group(0)))
            logger.debug("Extracted %d items from embedded JSON", len(items))
            return items
        except ValueError as exc:
            logger.debug("Embedded JSON parse failed: %s", exc)

    array_start = _ARRAY_START_RE.search(content)
    if array_start is not None:
        repaired = _repair_truncated_array(array_start.group(0))
        if repaired is not None:
            logger.warning("Recovered %d items from a truncated JSON array", len(repaired))
            return repaired

    logger.debug("Unparseable AI response: %s", content)
    raise ResponseParseError(
        message=f"Failed to parse AI response as JSON: {first_error}",
        raw_content=raw_text or "",
    )


def _identity(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def align_responses(
    requests: Sequence[T],
    responses: Sequence[Any],
    *,
    request_key: Callable[[T], object],
    response_key: str,
) -> list[dict[str, Any]]:
    """Return exactly one response mapping per request, in request order.

    A response whose ``response_key`` equals the request identity wins; when
    none exists, the response at the same position is used; otherwise the
    entry is an empty dict. Non-object response items count as missing.
    """
    if len(responses) != len(requests):
        logger.warning("AI returned %d responses (expected %d)", len(responses), len(requests))

    by_identity: dict[str, Mapping[str, Any]] = {}
    for position, response in enumerate(responses):
        if not isinstance(response, Mapping):
            logger.warning("AI response at index %d is not an object", position)
            continue
        identity = _identity(response.get(response_key))
        if identity is None:
            logger.debug("AI response at index %d missing %s", position, response_key)
            continue
        by_identity[identity] = response

    aligned: list[dict[str, Any]] = []
    for position, request in enumerate(requests):
        identity = _identity(request_key(request))

        if identity is not None and identity in by_identity:
            aligned.append(dict(by_identity[identity]))
            continue

        if position < len(responses) and isinstance(responses[position], Mapping):
            logger.info("Matched by position %d for %s", position, identity)
            aligned.append(dict(responses[position]))
            continue

        logger.warning("No response found for %s at index %d", identity, position)
        aligned.append({})

    return aligned
