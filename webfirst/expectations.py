"""
Expectation variants compared against observed locator state.

Each variant is frozen. Callers either build one explicitly or let
to_expectation() pick it from a plain Python value:

    to_expectation("Submit")                      -> Literal
    to_expectation(re.compile(r"Sub\\w+"))         -> Pattern
    to_expectation(["a", "b"])                    -> LiteralSequence
    to_expectation([re.compile("a"), ...])        -> PatternSequence
    to_expectation(2)                             -> Numeric
    to_structured_expectation({"a": 1})           -> StructuredValue
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union


def _quote(text: str) -> str:
    return f"'{text}'"


@dataclass(frozen=True)
class Literal:
    text: str

    def describe(self) -> str:
        return _quote(self.text)


@dataclass(frozen=True)
class Pattern:
    regex: re.Pattern[str]

    def describe(self) -> str:
        return _quote(self.regex.pattern)


@dataclass(frozen=True)
class LiteralSequence:
    items: tuple[str, ...]

    def describe(self) -> str:
        return "[" + ", ".join(_quote(item) for item in self.items) + "]"


@dataclass(frozen=True)
class PatternSequence:
    items: tuple[re.Pattern[str], ...]

    def describe(self) -> str:
        return "[" + ", ".join(_quote(item.pattern) for item in self.items) + "]"


@dataclass(frozen=True)
class Numeric:
    value: int

    def describe(self) -> str:
        return _quote(str(self.value))


@dataclass(frozen=True)
class StructuredValue:
    value: Any

    def describe(self) -> str:
        return _quote(repr(self.value))


Expectation = Union[Literal, Pattern, LiteralSequence, PatternSequence, Numeric, StructuredValue]

SEQUENCE_VARIANTS = (LiteralSequence, PatternSequence)
PATTERN_VARIANTS = (Pattern, PatternSequence)


def is_sequence(expectation: Expectation) -> bool:
    return isinstance(expectation, SEQUENCE_VARIANTS)


def is_pattern(expectation: Expectation) -> bool:
    return isinstance(expectation, PATTERN_VARIANTS)


def to_expectation(value: Any) -> Expectation:
    """
    Build the expectation variant for a text/count assertion argument.

    Raises:
        TypeError: for values that are not strings, patterns, ints or
            homogeneous sequences of strings or patterns.
    """
    if isinstance(value, (Literal, Pattern, LiteralSequence, PatternSequence, Numeric, StructuredValue)):
        return value
    if isinstance(value, str):
        return Literal(value)
    if isinstance(value, re.Pattern):
        return Pattern(value)
    if isinstance(value, bool):
        raise TypeError("bool is not a valid expectation; use the state assertion's flag instead")
    if isinstance(value, int):
        return Numeric(value)
    if isinstance(value, (list, tuple)):
        items = tuple(value)
        if all(isinstance(item, str) for item in items):
            return LiteralSequence(items)
        if all(isinstance(item, re.Pattern) for item in items):
            return PatternSequence(items)
        raise TypeError(
            "sequence expectations must contain only strings or only compiled patterns"
        )
    raise TypeError(f"unsupported expectation type: {type(value).__name__}")


def to_structured_expectation(value: Any) -> StructuredValue:
    if isinstance(value, StructuredValue):
        return value
    return StructuredValue(value)
