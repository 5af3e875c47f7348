"""
Matching of normalized observations against expectations.

Negation is the caller's concern; every function here answers the
positive question only.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any

from .expectations import (
    Expectation,
    Literal,
    LiteralSequence,
    Numeric,
    Pattern,
    PatternSequence,
    StructuredValue,
)
from .normalize import normalize_structured, normalize_text, structures_equal

logger = logging.getLogger(__name__)


class MatchMode(Enum):
    """How a literal expectation is compared to the observed text."""

    CONTAINS = "contains"
    EXACT = "exact"

    def __str__(self) -> str:
        return self.value


def _search(regex: re.Pattern[str], actual: str, ignore_case: bool) -> bool:
    if ignore_case and not regex.flags & re.IGNORECASE:
        regex = re.compile(regex.pattern, regex.flags | re.IGNORECASE)
    return regex.search(actual) is not None


def _compare_literal(actual: str, expected: str, mode: MatchMode, normalize: bool, ignore_case: bool) -> bool:
    if normalize:
        actual = normalize_text(actual)
        expected = normalize_text(expected)
    if ignore_case:
        actual = actual.casefold()
        expected = expected.casefold()
    if mode is MatchMode.CONTAINS:
        return expected in actual
    return actual == expected


def match_text(
    actual: str | None,
    expected: Literal | Pattern,
    mode: MatchMode,
    *,
    normalize: bool = True,
    ignore_case: bool = False,
) -> bool:
    """
    Match a single observed string.

    Literal expectations are compared after normalize_text() (when
    ``normalize`` is set). Pattern expectations are searched against the raw
    text in both modes.
    """
    text = actual or ""
    if isinstance(expected, Pattern):
        return _search(expected.regex, text, ignore_case)
    return _compare_literal(text, expected.text, mode, normalize, ignore_case)


def match_sequence(
    actual: list[str | None],
    expected: LiteralSequence | PatternSequence,
    mode: MatchMode,
    *,
    normalize: bool = True,
    ignore_case: bool = False,
) -> bool:
    """Element-wise, in-order match; a cardinality mismatch fails outright."""
    if len(actual) != len(expected.items):
        logger.debug("sequence length mismatch: observed %d, expected %d", len(actual), len(expected.items))
        return False
    for observed, item in zip(actual, expected.items):
        scalar: Literal | Pattern = Pattern(item) if isinstance(expected, PatternSequence) else Literal(item)
        if not match_text(observed, scalar, mode, normalize=normalize, ignore_case=ignore_case):
            return False
    return True


def match_count(actual: int, expected: Numeric) -> bool:
    return isinstance(actual, int) and not isinstance(actual, bool) and actual == expected.value


def match_structured(actual: Any, expected: StructuredValue) -> bool:
    return structures_equal(normalize_structured(actual), normalize_structured(expected.value))


def match(
    actual: Any,
    expected: Expectation,
    mode: MatchMode = MatchMode.EXACT,
    *,
    normalize: bool = True,
    ignore_case: bool = False,
) -> bool:
    """Dispatch on the expectation variant."""
    if isinstance(expected, (Literal, Pattern)):
        if isinstance(actual, (list, tuple)):
            return False
        return match_text(actual, expected, mode, normalize=normalize, ignore_case=ignore_case)
    if isinstance(expected, (LiteralSequence, PatternSequence)):
        if not isinstance(actual, (list, tuple)):
            return False
        return match_sequence(list(actual), expected, mode, normalize=normalize, ignore_case=ignore_case)
    if isinstance(expected, Numeric):
        return match_count(actual, expected)
    if isinstance(expected, StructuredValue):
        return match_structured(actual, expected)
    raise TypeError(f"unsupported expectation: {expected!r}")
