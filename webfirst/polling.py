"""
Retry/timeout engine behind every web-first assertion.

A Poller repeatedly awaits a zero-argument step until the step reports a
match or the deadline passes:

    poller = Poller(timeout_ms=5000)
    outcome = await poller.run(step)
    if not outcome.succeeded:
        ...

States: RUNNING -> SUCCEEDED | TIMED_OUT | FAILED. FAILED is entered when
a step raises anything other than NotYetReadyError; the exception is
re-raised unchanged. Cancellation of the surrounding task propagates as
asyncio.CancelledError and no outcome is produced.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .constants import DEFAULT_POLL_INTERVALS_MS
from .errors import NotYetReadyError

logger = logging.getLogger(__name__)


class PollState(Enum):
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PollingPolicy:
    """
    Pause schedule between observations (capped backoff).

    The pause before retry ``n`` (0-based) is ``intervals_ms[n]``; the last
    entry repeats once the schedule is exhausted. A zero pause still yields to
    the event loop.
    """

    intervals_ms: tuple[float, ...] = DEFAULT_POLL_INTERVALS_MS
    min_step_timeout_ms: float = 100.0
    """Lower bound for a single step's time budget, so the final observation at the deadline can complete."""

    def __post_init__(self) -> None:
        if not self.intervals_ms:
            raise ValueError("intervals_ms must not be empty")
        if any(interval < 0 for interval in self.intervals_ms):
            raise ValueError("intervals_ms must be non-negative")

    def interval_for(self, retry_index: int) -> float:
        if retry_index < len(self.intervals_ms):
            return float(self.intervals_ms[retry_index])
        return float(self.intervals_ms[-1])


@dataclass(frozen=True)
class StepResult:
    matched: bool
    value: Any = None
    has_value: bool = True


@dataclass(frozen=True)
class PollOutcome:
    state: PollState
    last_value: Any = None
    has_value: bool = False
    attempts: int = 0
    elapsed_ms: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state is PollState.SUCCEEDED


Step = Callable[[], Awaitable[StepResult]]
NativeWait = Callable[[float], Awaitable[bool]]


class Poller:
    """Single-use poll state machine; one instance per assertion call."""

    def __init__(
        self,
        timeout_ms: float,
        policy: PollingPolicy | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        self.timeout_ms = float(timeout_ms)
        self.policy = policy or PollingPolicy()
        self._clock = clock
        self._sleep = sleep
        self._state = PollState.RUNNING
        self._started: float | None = None
        self._deadline: float | None = None
        self._attempts = 0
        self._last_value: Any = None
        self._has_value = False

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    def remaining_ms(self) -> float:
        if self._deadline is None:
            return self.timeout_ms
        return max(0.0, (self._deadline - self._clock()) * 1000.0)

    def _elapsed_ms(self) -> float:
        if self._started is None:
            return 0.0
        return (self._clock() - self._started) * 1000.0

    def _finish(self, state: PollState) -> PollOutcome:
        self._state = state
        return PollOutcome(
            state=state,
            last_value=self._last_value,
            has_value=self._has_value,
            attempts=self._attempts,
            elapsed_ms=self._elapsed_ms(),
        )

    async def _attempt(self, step: Step) -> bool:
        self._attempts += 1
        budget_s = max(self.remaining_ms(), self.policy.min_step_timeout_ms) / 1000.0
        try:
            result = await asyncio.wait_for(step(), timeout=budget_s)
        except NotYetReadyError as e:
            logger.debug("attempt %d: not ready yet (%s)", self._attempts, e)
            return False
        except asyncio.TimeoutError:
            logger.debug("attempt %d: step exceeded %.0fms budget", self._attempts, budget_s * 1000.0)
            return False
        except Exception:
            self._state = PollState.FAILED
            raise
        if result.has_value:
            self._last_value = result.value
            self._has_value = True
        logger.debug("attempt %d: matched=%s value=%r", self._attempts, result.matched, result.value)
        return result.matched

    async def _native_wait(self, native_wait: NativeWait) -> None:
        try:
            reached = await native_wait(self.remaining_ms())
        except NotYetReadyError as e:
            logger.debug("native wait gave up: %s", e)
            return
        except Exception:
            self._state = PollState.FAILED
            raise
        logger.debug("native wait reached=%s", reached)

    async def run(self, step: Step, native_wait: NativeWait | None = None) -> PollOutcome:
        """
        Drive ``step`` until it matches or the deadline passes.

        When ``native_wait`` is given the engine does the waiting first; the
        regular loop then confirms the result, falling back to client-side
        polling for whatever time remains.
        """
        if self._state is not PollState.RUNNING or self._started is not None:
            raise RuntimeError("Poller instances are single-use")
        self._started = self._clock()
        self._deadline = self._started + self.timeout_ms / 1000.0

        if native_wait is not None:
            await self._native_wait(native_wait)

        retry_index = 0
        while True:
            if await self._attempt(step):
                return self._finish(PollState.SUCCEEDED)

            remaining = self.remaining_ms()
            if remaining <= 0:
                return self._finish(PollState.TIMED_OUT)

            pause_ms = min(self.policy.interval_for(retry_index), remaining)
            retry_index += 1
            await self._sleep(pause_ms / 1000.0)
