"""
Exception types raised by webfirst assertions.

NotYetReadyError is contained by the poller and never reaches callers.
StructuralFaultError and asyncio.CancelledError propagate unchanged.
ExpectationFailedError is the only user-visible assertion failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .assertions import AssertionRequest
    from .models import AssertionRecord
    from .polling import PollOutcome


class WebFirstError(Exception):
    """Base exception for webfirst."""


class NotYetReadyError(WebFirstError):
    """The observed element or value is not available yet (element not attached, attribute absent)."""


class StructuralFaultError(WebFirstError):
    """The remote engine rejected the query (malformed selector, detached frame, strict mode violation)."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ExpectationFailedError(WebFirstError, AssertionError):
    def __init__(
        self,
        message: str,
        *,
        request: AssertionRequest | None = None,
        outcome: PollOutcome | None = None,
        record: AssertionRecord | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.request = request
        self.outcome = outcome
        self.record = record

    @property
    def last_value(self) -> Any:
        return self.outcome.last_value if self.outcome is not None else None
