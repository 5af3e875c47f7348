"""
Value normalization for literal comparisons.

Text normalization is only applied to literal expectations; pattern
expectations always see the raw text reported by the engine.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any

from .constants import ZERO_WIDTH_SPACE

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_text(raw: str | None) -> str:
    """
    Collapse whitespace the way a reader perceives it.

    Zero-width spaces are dropped, every run of Unicode whitespace (NBSP,
    newlines, tabs) becomes a single ASCII space, and both ends are trimmed.
    """
    if not raw:
        return ""
    text = raw.replace(ZERO_WIDTH_SPACE, "")
    return _WHITESPACE_RUN.sub(" ", text).strip()


def _to_instant(value: datetime | date) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def normalize_structured(raw: Any) -> Any:
    """
    Deep-convert an engine value into a canonical tree.

    Mappings become dicts with string keys, lists/tuples become lists,
    datetimes become aware UTC instants (naive values are read as UTC) and
    compiled patterns become (pattern, flags) pairs.
    """
    if isinstance(raw, Mapping):
        return {str(key): normalize_structured(value) for key, value in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [normalize_structured(value) for value in raw]
    if isinstance(raw, (datetime, date)):
        return _to_instant(raw)
    if isinstance(raw, re.Pattern):
        return (raw.pattern, raw.flags)
    return raw


def structures_equal(left: Any, right: Any) -> bool:
    """Typed deep equality over canonical trees produced by normalize_structured()."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        if isinstance(left, float) and isinstance(right, float):
            if math.isnan(left) and math.isnan(right):
                return True
        return left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(structures_equal(left[key], right[key]) for key in left)
    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(structures_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, datetime) and isinstance(right, datetime):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right
