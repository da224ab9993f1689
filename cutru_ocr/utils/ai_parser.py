import json
import re
import logging
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*(?:```|$)", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

ENVELOPE_KEYS = ("data", "records", "result", "items", "rows")


def parse_ai_response(response_text: Optional[str]) -> List[Dict[str, Any]]:
    """
    Parse the vision model's text into a list of row dictionaries.

    Tries, in order:
    1. The whole text (after stripping markdown fences) as JSON.
    2. The outermost [...] span as JSON.
    3. Every complete top-level {...} object of a truncated array.

    Args:
        response_text: Raw text response from AI

    Returns:
        List of row dictionaries (empty if nothing could be recovered)
    """
    if not response_text:
        return []

    clean_text = strip_code_fences(response_text)

    rows = _parse_json_rows(clean_text)
    if rows is not None:
        return rows

    array_match = _ARRAY_RE.search(clean_text)
    if array_match:
        rows = _parse_json_rows(array_match.group(0))
        if rows is not None:
            return rows

    recovered = recover_complete_objects(clean_text)
    if recovered:
        logger.info(f"Recovered {len(recovered)} complete objects from truncated response")
        return recovered

    logger.warning(f"Could not parse any JSON from response: {response_text[:200]!r}")
    return []


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` fencing (closing fence optional)."""
    text = text.strip()
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text


def _parse_json_rows(text: str) -> Optional[List[Dict[str, Any]]]:
    """Return rows if ``text`` is valid JSON of a supported shape, else None."""
    try:
        data = json.loads(text)
    except ValueError:
        return None

    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ENVELOPE_KEYS:
            if key in data and isinstance(data[key], list):
                return data[key]
        return [data]
    return None


def recover_complete_objects(text: str) -> List[Dict[str, Any]]:
    """
    Collect every balanced top-level {...} after the first '['.

    Braces inside JSON string literals are ignored. Objects that fail to
    parse are skipped.
    """
    start = text.find("[")
    if start == -1:
        return []

    objects: List[Dict[str, Any]] = []
    depth = 0
    object_start = -1
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                object_start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and object_start != -1:
                try:
                    obj = json.loads(text[object_start:i + 1])
                except ValueError:
                    obj = None
                if isinstance(obj, dict):
                    objects.append(obj)
                object_start = -1

    return objects
