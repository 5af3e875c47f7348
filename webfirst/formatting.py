"""
Failure message formatting for timed-out assertions.

A message has three lines:

    Locator expected to have class 'kektus'
    But was: 'foo bar baz'
    LocatorAssertions.to_have_class with timeout 300ms

The second line is omitted when nothing was observed, and for state
assertions where the observed value is just the negation of the first line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .expectations import Pattern, PatternSequence
from .kinds import AssertionKind

if TYPE_CHECKING:
    from .assertions import AssertionRequest
    from .polling import PollOutcome

FACADE_NAME = "LocatorAssertions"


def describe_value(value: Any) -> str:
    """Render an observed value with the same quoting rules as expectations."""
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(describe_value(item) for item in value) + "]"
    if isinstance(value, bool):
        return "'true'" if value else "'false'"
    if value is None:
        return "'null'"
    if isinstance(value, (str, int, float)):
        return f"'{value}'"
    return f"'{value!r}'"


def format_timeout(timeout_ms: float) -> str:
    if float(timeout_ms).is_integer():
        return f"{int(timeout_ms)}ms"
    return f"{timeout_ms:g}ms"


def _subject(request: AssertionRequest) -> str:
    kind = request.kind
    if kind in (AssertionKind.CONTAINS_TEXT, AssertionKind.HAS_TEXT):
        return "text"
    if kind is AssertionKind.HAS_ATTRIBUTE:
        return f"attribute '{request.name}'"
    if kind is AssertionKind.HAS_CSS:
        return f"CSS property '{request.name}'"
    if kind is AssertionKind.HAS_CLASS:
        return "class"
    if kind is AssertionKind.HAS_COUNT:
        return "count"
    if kind is AssertionKind.HAS_ID:
        return "id"
    if kind is AssertionKind.HAS_JS_PROPERTY:
        return f"JS property '{request.name}'"
    if kind is AssertionKind.HAS_VALUE:
        return "value"
    raise ValueError(f"{kind} has no value subject")


def _value_phrase(request: AssertionRequest) -> str:
    kind = request.kind
    subject = _subject(request)
    expected = request.expectation.describe()

    if isinstance(request.expectation, (Pattern, PatternSequence)):
        relation = "not matching" if request.negated else "matching"
        return f"{subject} {relation} regex {expected}"

    prefix = "not to" if request.negated else "to"
    if kind is AssertionKind.CONTAINS_TEXT:
        return f"{prefix} contain text {expected}"
    if kind in (AssertionKind.HAS_ATTRIBUTE, AssertionKind.HAS_CSS, AssertionKind.HAS_JS_PROPERTY):
        return f"{prefix} have {subject} with value {expected}"
    return f"{prefix} have {subject} {expected}"


def expectation_line(request: AssertionRequest) -> str:
    if request.kind.is_state:
        positive = request.expected_state != request.negated
        phrase = "to be" if positive else "not to be"
        return f"Locator expected {phrase} {request.kind.state_word}"
    return f"Locator expected {_value_phrase(request)}"


def footer_line(request: AssertionRequest) -> str:
    return f"{FACADE_NAME}.{request.kind.method_name} with timeout {format_timeout(request.timeout_ms)}"


def format_failure(request: AssertionRequest, outcome: PollOutcome) -> str:
    lines = []
    if request.message:
        lines.append(request.message)
    lines.append(expectation_line(request))
    if outcome.has_value and not request.kind.is_state:
        lines.append(f"But was: {describe_value(outcome.last_value)}")
    lines.append(footer_line(request))
    return "\n".join(lines)
