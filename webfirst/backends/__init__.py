"""
Locator backends for webfirst.

The assertion core talks to the automation engine only through the
LocatorBackend protocol. PlaywrightLocatorBackend is the default and is
imported lazily so the core can be used (and unit tested) with any object
implementing the protocol.
"""

from typing import Any

from .protocol import (
    CAPABILITY_WAIT_FOR_STATE,
    ElementState,
    LocatorBackend,
    NativeWaitBackend,
    ObserveQuery,
    describe_locator,
)

__all__ = [
    "CAPABILITY_WAIT_FOR_STATE",
    "ElementState",
    "LocatorBackend",
    "NativeWaitBackend",
    "ObserveQuery",
    "PlaywrightLocatorBackend",
    "describe_locator",
]


def __getattr__(name: str) -> Any:
    if name == "PlaywrightLocatorBackend":
        from .playwright_backend import PlaywrightLocatorBackend

        return PlaywrightLocatorBackend
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
