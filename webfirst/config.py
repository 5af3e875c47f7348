"""
Process-wide assertion defaults.

    from webfirst import set_default_timeout
    set_default_timeout(10_000)  # every expect() without an explicit timeout

Per-call `timeout=` and `expect(..., timeout=)` always win over these values.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from .constants import DEFAULT_EXPECT_TIMEOUT_MS
from .polling import PollingPolicy


@dataclass(frozen=True)
class ExpectDefaults:
    timeout_ms: float = DEFAULT_EXPECT_TIMEOUT_MS
    polling: PollingPolicy = field(default_factory=PollingPolicy)


_defaults = ExpectDefaults()


def get_defaults() -> ExpectDefaults:
    return _defaults


def get_default_timeout() -> float:
    return _defaults.timeout_ms


def set_default_timeout(timeout_ms: float) -> None:
    global _defaults
    if timeout_ms < 0:
        raise ValueError("timeout_ms must be >= 0")
    _defaults = replace(_defaults, timeout_ms=float(timeout_ms))


def set_default_polling(policy: PollingPolicy) -> None:
    global _defaults
    _defaults = replace(_defaults, polling=policy)


def reset_defaults() -> None:
    global _defaults
    _defaults = ExpectDefaults()
