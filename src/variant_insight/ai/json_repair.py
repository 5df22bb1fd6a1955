"""Tolerant parsing of JSON returned by generative models.

Model output may be wrapped in markdown fences, preceded by prose, cut off
mid-object or carry trailing commas. Parsing strips fences, isolates the
outermost object or array with a string-aware bracket scan, and on failure
tries one repair pass before giving up with AIResponseError.
"""

import json
import re
from typing import Any

import structlog

from variant_insight.errors import AIResponseError

logger = structlog.get_logger()

_FENCE_OPEN = re.compile(r"```json\s*", re.IGNORECASE)
_FENCE_ANY = re.compile(r"```\s*")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```)."""
    return _FENCE_ANY.sub("", _FENCE_OPEN.sub("", text))


def extract_json_block(text: str) -> str | None:
    """Return the outermost JSON object or array in text.

    Whichever of "{" or "[" occurs first opens the block. Brackets inside
    string literals are ignored. If the block never closes (truncated
    output) everything from the opening bracket onwards is returned.

    Returns:
        The candidate JSON substring, or None if text has no opening bracket
    """
    first_object = text.find("{")
    first_array = text.find("[")

    if first_object == -1 and first_array == -1:
        return None

    if first_object != -1 and (first_array == -1 or first_object < first_array):
        start, open_char, close_char = first_object, "{", "}"
    else:
        start, open_char, close_char = first_array, "[", "]"

    balance = 0
    in_string = False
    escape = False

    for index in range(start, len(text)):
        char = text[index]
        if escape:
            escape = False
            continue
        if char == "\\":
            escape = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == open_char:
            balance += 1
        elif char == close_char:
            balance -= 1
            if balance == 0:
                return text[start:index + 1]

    return text[start:]


def repair_json(candidate: str) -> str:
    """Best-effort repair of truncated or sloppy JSON.

    Appends missing closing braces/brackets and removes trailing commas
    before a closing bracket.
    """
    repaired = candidate.strip()

    missing_braces = repaired.count("{") - repaired.count("}")
    missing_brackets = repaired.count("[") - repaired.count("]")
    if missing_braces > 0:
        repaired += "}" * missing_braces
    if missing_brackets > 0:
        repaired += "]" * missing_brackets

    return _TRAILING_COMMA.sub(r"\1", repaired)


def parse_model_json(text: str | None) -> Any:
    """Parse a model response into JSON data.

    Args:
        text: Raw model output

    Returns:
        Parsed JSON value (usually dict or list)

    Raises:
        AIResponseError: If the response is empty or cannot be parsed
            even after repair
    """
    if not text:
        raise AIResponseError("Empty AI response")

    clean = strip_code_fences(text)
    candidate = extract_json_block(clean)

    if candidate is None:
        try:
            return json.loads(clean)
        except json.JSONDecodeError as e:
            raise AIResponseError(raw_text=text) from e

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        logger.warning("ai_json_parse_failed", action="attempting_repair")

    try:
        return json.loads(repair_json(candidate))
    except json.JSONDecodeError as e:
        logger.error("ai_json_repair_failed", candidate_chars=len(candidate))
        raise AIResponseError(raw_text=text) from e
