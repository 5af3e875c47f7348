"""
Tests for the Poller state machine.

Most tests drive a fake clock so the schedule is deterministic; a few use
the real event loop with tiny timeouts to check cancellation and step
budgets.
"""

from __future__ import annotations

import asyncio
import time

import pytest

from webfirst.errors import NotYetReadyError, StructuralFaultError
from webfirst.polling import Poller, PollingPolicy, PollState, StepResult


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class Timeline:
    """Step returning scripted results; the last entry repeats."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self) -> StepResult:
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def _poller(timeout_ms: float, clock: FakeClock, intervals=(0, 125, 250, 500)) -> Poller:
    return Poller(timeout_ms, PollingPolicy(intervals_ms=intervals), clock=clock, sleep=clock.sleep)


@pytest.mark.asyncio
async def test_immediate_match_takes_one_attempt() -> None:
    clock = FakeClock()
    poller = _poller(1000, clock)
    outcome = await poller.run(Timeline(StepResult(matched=True, value="ok")))

    assert outcome.state is PollState.SUCCEEDED
    assert outcome.succeeded
    assert outcome.attempts == 1
    assert outcome.last_value == "ok"
    assert outcome.has_value
    assert clock.sleeps == []
    assert poller.state is PollState.SUCCEEDED


@pytest.mark.asyncio
async def test_eventual_match() -> None:
    clock = FakeClock()
    step = Timeline(
        StepResult(matched=False, value=1),
        StepResult(matched=False, value=1),
        StepResult(matched=True, value=2),
    )
    outcome = await _poller(1000, clock).run(step)

    assert outcome.succeeded
    assert outcome.attempts == 3
    assert outcome.last_value == 2
    assert clock.sleeps == [0.0, 0.125]


@pytest.mark.asyncio
async def test_backoff_schedule_is_capped_by_deadline() -> None:
    clock = FakeClock()
    poller = _poller(1000, clock)
    outcome = await poller.run(Timeline(StepResult(matched=False, value="nope")))

    assert outcome.state is PollState.TIMED_OUT
    # 0 + 125 + 250 + 500 = 875, then the last pause is cut to the 125ms left.
    assert clock.sleeps == [0.0, 0.125, 0.25, 0.5, 0.125]
    # One final observation is made at the deadline.
    assert outcome.attempts == 6
    assert outcome.last_value == "nope"
    assert outcome.elapsed_ms == pytest.approx(1000.0)


@pytest.mark.asyncio
async def test_zero_timeout_observes_exactly_once() -> None:
    clock = FakeClock()
    step = Timeline(StepResult(matched=False, value="x"))
    outcome = await _poller(0, clock).run(step)

    assert outcome.state is PollState.TIMED_OUT
    assert outcome.attempts == 1
    assert step.calls == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_not_yet_ready_is_retried_and_has_no_value() -> None:
    clock = FakeClock()
    step = Timeline(NotYetReadyError("not attached"))
    outcome = await _poller(500, clock).run(step)

    assert outcome.state is PollState.TIMED_OUT
    assert outcome.attempts > 1
    assert not outcome.has_value
    assert outcome.last_value is None


@pytest.mark.asyncio
async def test_not_yet_ready_then_match() -> None:
    clock = FakeClock()
    step = Timeline(NotYetReadyError("absent"), StepResult(matched=True, value="here"))
    outcome = await _poller(500, clock).run(step)

    assert outcome.succeeded
    assert outcome.attempts == 2


@pytest.mark.asyncio
async def test_last_value_survives_later_not_ready() -> None:
    clock = FakeClock()
    step = Timeline(StepResult(matched=False, value="seen"), NotYetReadyError("gone"))
    outcome = await _poller(300, clock).run(step)

    assert outcome.state is PollState.TIMED_OUT
    assert outcome.has_value
    assert outcome.last_value == "seen"


@pytest.mark.asyncio
async def test_structural_fault_propagates_without_retry() -> None:
    clock = FakeClock()
    step = Timeline(StructuralFaultError("malformed selector"))
    poller = _poller(5000, clock)

    with pytest.raises(StructuralFaultError, match="malformed selector"):
        await poller.run(step)

    assert poller.state is PollState.FAILED
    assert step.calls == 1
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_unexpected_exception_propagates_unchanged() -> None:
    clock = FakeClock()
    poller = _poller(5000, clock)

    with pytest.raises(KeyError):
        await poller.run(Timeline(KeyError("boom")))
    assert poller.state is PollState.FAILED


@pytest.mark.asyncio
async def test_poller_is_single_use() -> None:
    clock = FakeClock()
    poller = _poller(100, clock)
    await poller.run(Timeline(StepResult(matched=True)))

    with pytest.raises(RuntimeError):
        await poller.run(Timeline(StepResult(matched=True)))


@pytest.mark.asyncio
async def test_native_wait_runs_first_with_full_budget() -> None:
    clock = FakeClock()
    waits: list[float] = []

    async def native_wait(timeout_ms: float) -> bool:
        waits.append(timeout_ms)
        clock.now += 0.2
        return True

    outcome = await _poller(1000, clock).run(Timeline(StepResult(matched=True, value=True)), native_wait=native_wait)

    assert waits == [1000.0]
    assert outcome.succeeded
    assert outcome.attempts == 1


@pytest.mark.asyncio
async def test_native_wait_not_ready_falls_back_to_polling() -> None:
    clock = FakeClock()

    async def native_wait(timeout_ms: float) -> bool:
        raise NotYetReadyError("detached")

    step = Timeline(StepResult(matched=False), StepResult(matched=True))
    outcome = await _poller(1000, clock).run(step, native_wait=native_wait)

    assert outcome.succeeded
    assert outcome.attempts == 2


@pytest.mark.asyncio
async def test_native_wait_structural_fault_propagates() -> None:
    clock = FakeClock()
    step = Timeline(StepResult(matched=True))

    async def native_wait(timeout_ms: float) -> bool:
        raise StructuralFaultError("frame detached")

    poller = _poller(1000, clock)
    with pytest.raises(StructuralFaultError):
        await poller.run(step, native_wait=native_wait)
    assert poller.state is PollState.FAILED
    assert step.calls == 0


@pytest.mark.asyncio
async def test_hung_step_is_bounded_by_remaining_time() -> None:
    async def hung() -> StepResult:
        await asyncio.sleep(10)
        return StepResult(matched=True)

    poller = Poller(50, PollingPolicy(intervals_ms=(0,), min_step_timeout_ms=20))
    started = time.monotonic()
    outcome = await poller.run(hung)

    assert outcome.state is PollState.TIMED_OUT
    assert time.monotonic() - started < 1.0


@pytest.mark.asyncio
async def test_cancellation_propagates() -> None:
    async def never() -> StepResult:
        return StepResult(matched=False)

    poller = Poller(10_000, PollingPolicy(intervals_ms=(5,)))
    task = asyncio.create_task(poller.run(never))
    await asyncio.sleep(0.02)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert poller.state is PollState.RUNNING


def test_negative_timeout_rejected() -> None:
    with pytest.raises(ValueError):
        Poller(-1)


def test_policy_interval_repeats_last_entry() -> None:
    policy = PollingPolicy(intervals_ms=(0, 100, 250))
    assert [policy.interval_for(i) for i in range(5)] == [0.0, 100.0, 250.0, 250.0, 250.0]


@pytest.mark.parametrize("intervals", [(), (100, -1)])
def test_policy_validates_intervals(intervals) -> None:
    with pytest.raises(ValueError):
        PollingPolicy(intervals_ms=intervals)


def test_remaining_before_start_is_full_timeout() -> None:
    assert Poller(250).remaining_ms() == 250.0
