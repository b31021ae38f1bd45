"""Strip the provider's anti-hijacking guard and unwrap its JSON envelopes."""

import json
import logging
from typing import Any

from trendwire.errors import ParseError
from trendwire.types import Payload

logger = logging.getLogger(__name__)

GUARD = ")]}'"

# Position of the JSON-encoded payload string inside level1[0].
_NESTED_JSON_INDEX = 2
# Position of the record array inside the decoded level-2 list.
_PAYLOAD_INDEX = 1

_HTML_MARKERS = ("<html", "<!doctype html")


def strip_guard(text: str) -> str:
    """Remove the ``)]}'`` guard prefix and surrounding whitespace.

    The widgetdata endpoints append a comma to the guard (``)]}',``); that
    comma is dropped too.  Text without the guard is only trimmed, so the
    function is idempotent.

    Args:
        text: Raw response body.

    Returns:
        Text believed to be JSON.
    """
    stripped = text.strip()
    if stripped.startswith(GUARD):
        stripped = stripped[len(GUARD):].lstrip()
        if stripped.startswith(","):
            stripped = stripped[1:]
    return stripped.strip()


def load_json(text: str) -> Any:
    """Strip the guard from a single-stage body and parse it.

    Args:
        text: Raw response body from an explore, widgetdata or
            autocomplete endpoint.

    Returns:
        The decoded JSON document.

    Raises:
        ParseError: If the body is an HTML page or is not valid JSON.
    """
    cleaned = strip_guard(text)
    if cleaned[:15].lower().startswith(_HTML_MARKERS):
        raise ParseError("Response returned HTML instead of JSON",
                         details=cleaned[:200])
    try:
        return json.loads(cleaned)
    except ValueError as exc:
        raise ParseError("Failed to parse response",
                         details=str(exc)) from exc


def unwrap_batch_response(text: str) -> Payload:
    """Decode a doubly-encoded ``batchexecute`` body into its record array.

    Level 1 is ``[[rpc_id, ?, "<json string>", ...], ...]``; the string at
    ``level1[0][2]`` decodes to level 2, whose element ``1`` is the payload.

    Args:
        text: Raw response body.

    Returns:
        ``level2[1]``, unvalidated beyond being present.

    Raises:
        ParseError: On any JSON syntax error or shape violation.
    """
    cleaned = strip_guard(text)
    try:
        level1 = json.loads(cleaned)
    except ValueError as exc:
        raise ParseError("Failed to parse response",
                         details=str(exc)) from exc

    if not isinstance(level1, list) or not level1:
        raise ParseError("Invalid response format: empty array")

    first = level1[0]
    nested = (first[_NESTED_JSON_INDEX]
              if isinstance(first, list) and len(first) > _NESTED_JSON_INDEX
              else None)
    if not isinstance(nested, str) or not nested:
        raise ParseError("Invalid response format: missing nested JSON")

    try:
        level2 = json.loads(nested)
    except ValueError as exc:
        raise ParseError("Failed to parse response",
                         details=str(exc)) from exc

    if not isinstance(level2, list) or len(level2) <= _PAYLOAD_INDEX:
        raise ParseError("Invalid response format: missing data array")

    logger.debug("Unwrapped batch response (%d chars)", len(text))
    return level2[_PAYLOAD_INDEX]
