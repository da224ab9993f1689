"""
Scalar value cleanup for OCR fields.

The vision model writes missing cells as real nulls, as the text "null", or
as placeholders like "N/A". Numbers come back as ints, floats or strings with
commentary attached ("12 (ước tính)"). These helpers map every input to a
defined value and never raise.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

_EMPTY_VALUE_RE = re.compile(r"^(?:null|undefined|n/?a)$", re.IGNORECASE)
_INTEGER_RE = re.compile(r"-?\d+")


def normalize_nullable_string(value: Any) -> Optional[str]:
    """Return the trimmed string, or None for null-ish input."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        value = str(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or _EMPTY_VALUE_RE.match(text):
        return None
    return text


def to_nullable_integer(value: Any) -> Optional[int]:
    """
    Coerce to int, truncating floats toward zero.

    Strings yield their first integer substring ("page 7 of 10" -> 7).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _INTEGER_RE.search(value)
        if match:
            return int(match.group(0))
    return None


def to_required_positive_integer(value: Any, fallback: int) -> int:
    """Like to_nullable_integer, but absent or non-positive results become ``fallback``."""
    number = to_nullable_integer(value)
    if number is None or number <= 0:
        return fallback
    return number
