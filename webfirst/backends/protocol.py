"""
Backend protocol for observing locator state.

A backend answers one question per call: "what does the engine currently
report for this locator and assertion kind?". It raises NotYetReadyError
when the answer is not available yet and StructuralFaultError when the
query itself is broken. Retrying, matching and negation live elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol, runtime_checkable

from ..kinds import AssertionKind

ElementState = Literal["attached", "detached", "visible", "hidden"]

CAPABILITY_WAIT_FOR_STATE = "wait_for_state"


@dataclass(frozen=True)
class ObserveQuery:
    kind: AssertionKind
    name: Optional[str] = None  # attribute / css property / js property name
    multiple: bool = False  # observe every matching element, in document order
    use_inner_text: bool = False
    probe_timeout_ms: float = 1_000.0


@runtime_checkable
class LocatorBackend(Protocol):
    async def observe(self, locator: Any, query: ObserveQuery) -> Any:
        """
        Return the raw observable value for ``query.kind``.

        bool for state kinds, str (or list[str] when ``multiple``) for text,
        attribute, css, class, id and value kinds, int for HAS_COUNT, and the
        engine's deserialized value for HAS_JS_PROPERTY.
        """
        ...

    def can(self, capability: str) -> bool:
        ...


@runtime_checkable
class NativeWaitBackend(LocatorBackend, Protocol):
    async def wait_for_state(self, locator: Any, state: ElementState, timeout_ms: float) -> bool:
        """Let the engine wait for ``state``; False when ``timeout_ms`` elapses first."""
        ...


def describe_locator(locator: Any) -> Optional[str]:
    """Best-effort selector text for diagnostics and traces."""
    for attr in ("selector", "_selector", "_impl_obj"):
        value = getattr(locator, attr, None)
        if isinstance(value, str):
            return value
        inner = getattr(value, "_selector", None)
        if isinstance(inner, str):
            return inner
    return None
