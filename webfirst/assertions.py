"""
Web-first assertions over remote locators.

Every assertion re-observes the locator until the expectation holds or the
timeout elapses, so it tolerates pages that are still rendering:

    from webfirst import expect

    await expect(page.locator("#status")).to_have_text("Done")
    await expect(page.locator("input")).not_.to_be_checked(timeout=300)
    await expect(page.locator("li")).to_have_text(["One", re.compile("T.o")])

A failed assertion raises ExpectationFailedError (an AssertionError)
whose message names the expectation, the last observed value and the
timeout. Query errors that retrying cannot fix (invalid selector, strict
mode violation) propagate as StructuralFaultError without waiting.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from .backends.protocol import (
    CAPABILITY_WAIT_FOR_STATE,
    ElementState,
    LocatorBackend,
    ObserveQuery,
    describe_locator,
)
from .config import get_defaults
from .constants import DEFAULT_PROBE_TIMEOUT_MS
from .errors import ExpectationFailedError, NotYetReadyError
from .expectations import (
    Expectation,
    Literal,
    Numeric,
    Pattern,
    StructuredValue,
    is_pattern,
    is_sequence,
    to_expectation,
    to_structured_expectation,
)
from .formatting import describe_value, expectation_line, format_failure
from .kinds import NORMALIZED_TEXT_KINDS, AssertionKind
from .matching import MatchMode, match
from .models import AssertionRecord, ExpectOptions
from .normalize import normalize_text
from .polling import NativeWait, Poller, PollingPolicy, PollOutcome, PollState, StepResult
from .tracing import Tracer

logger = logging.getLogger(__name__)

TextExpectation = Union[str, re.Pattern[str]]
TextOrSequence = Union[str, re.Pattern[str], Sequence[str], Sequence[re.Pattern[str]]]


@dataclass(frozen=True)
class AssertionRequest:
    """Everything one assertion call needs; built per call and never reused."""

    locator: Any
    kind: AssertionKind
    expectation: Optional[Expectation]
    negated: bool
    timeout_ms: float
    polling: PollingPolicy
    name: Optional[str] = None
    expected_state: bool = True
    use_inner_text: bool = False
    ignore_case: bool = False
    message: Optional[str] = None

    @property
    def match_mode(self) -> MatchMode:
        if self.kind is AssertionKind.CONTAINS_TEXT:
            return MatchMode.CONTAINS
        return MatchMode.EXACT

    @property
    def normalize(self) -> bool:
        return self.kind in NORMALIZED_TEXT_KINDS

    @property
    def multiple(self) -> bool:
        return self.expectation is not None and is_sequence(self.expectation)


def _scalar_text(value: Any) -> Literal | Pattern:
    expectation = to_expectation(value)
    if not isinstance(expectation, (Literal, Pattern)):
        raise TypeError(f"expected a string or compiled pattern, got {type(value).__name__}")
    return expectation


def _text_or_sequence(value: Any) -> Expectation:
    expectation = to_expectation(value)
    if isinstance(expectation, (Numeric, StructuredValue)):
        raise TypeError(f"expected text, a pattern or a sequence of them, got {type(value).__name__}")
    return expectation


def evaluate_observation(request: AssertionRequest, observed: Any) -> bool:
    """Positive match of one observation; negation is applied by the caller."""
    if request.kind.is_state:
        return bool(observed) == request.expected_state
    if request.expectation is None:
        raise ValueError(f"{request.kind.method_name} needs an expectation")
    return match(
        observed,
        request.expectation,
        request.match_mode,
        normalize=request.normalize,
        ignore_case=request.ignore_case,
    )


def diagnostic_value(request: AssertionRequest, observed: Any) -> Any:
    """The value reported as 'But was': normalized for literal text, raw for patterns."""
    if not request.normalize or request.expectation is None or is_pattern(request.expectation):
        return observed
    if isinstance(observed, (list, tuple)):
        return [normalize_text(item) for item in observed]
    if isinstance(observed, str):
        return normalize_text(observed)
    return observed


class LocatorAssertions:
    """
    Assertion facade bound to one locator.

    Instances are cheap; `.not_` returns a negated twin sharing the same
    backend, tracer and defaults.
    """

    def __init__(
        self,
        locator: Any,
        *,
        backend: LocatorBackend | None = None,
        tracer: Tracer | None = None,
        timeout: float | None = None,
        message: str | None = None,
        polling: PollingPolicy | None = None,
        is_not: bool = False,
    ) -> None:
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be >= 0")
        self._locator = locator
        self._backend = backend
        self._tracer = tracer
        self._timeout = timeout
        self._message = message
        self._polling = polling
        self._is_not = is_not

    @property
    def not_(self) -> LocatorAssertions:
        return LocatorAssertions(
            self._locator,
            backend=self._backend,
            tracer=self._tracer,
            timeout=self._timeout,
            message=self._message,
            polling=self._polling,
            is_not=not self._is_not,
        )

    @property
    def backend(self) -> LocatorBackend:
        if self._backend is None:
            # Lazy import so the core can run against any LocatorBackend without Playwright loaded.
            from .backends.playwright_backend import PlaywrightLocatorBackend

            self._backend = PlaywrightLocatorBackend()
        return self._backend

    # ------------------------------------------------------------------ state

    async def to_be_checked(
        self, checked: bool | None = None, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        await self._assert_state(AssertionKind.CHECKED, checked, timeout, options)

    async def to_be_editable(
        self, editable: bool | None = None, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        await self._assert_state(AssertionKind.EDITABLE, editable, timeout, options)

    async def to_be_enabled(
        self, enabled: bool | None = None, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        await self._assert_state(AssertionKind.ENABLED, enabled, timeout, options)

    async def to_be_disabled(self, *, timeout: float | None = None, options: ExpectOptions | None = None) -> None:
        await self._assert_state(AssertionKind.DISABLED, True, timeout, options)

    async def to_be_empty(self, *, timeout: float | None = None, options: ExpectOptions | None = None) -> None:
        await self._assert_state(AssertionKind.EMPTY, True, timeout, options)

    async def to_be_visible(
        self, visible: bool | None = None, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        await self._assert_state(AssertionKind.VISIBLE, visible, timeout, options)

    async def to_be_hidden(self, *, timeout: float | None = None, options: ExpectOptions | None = None) -> None:
        await self._assert_state(AssertionKind.HIDDEN, True, timeout, options)

    async def to_be_focused(self, *, timeout: float | None = None, options: ExpectOptions | None = None) -> None:
        await self._assert_state(AssertionKind.FOCUSED, True, timeout, options)

    # ------------------------------------------------------------------- text

    async def to_contain_text(
        self,
        expected: TextOrSequence,
        *,
        use_inner_text: bool | None = None,
        ignore_case: bool | None = None,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
    ) -> None:
        """Substring match for literals (whitespace-normalized), regex search for patterns."""
        await self._assert_value(
            AssertionKind.CONTAINS_TEXT,
            _text_or_sequence(expected),
            timeout=timeout,
            options=options,
            use_inner_text=use_inner_text,
            ignore_case=ignore_case,
        )

    async def to_have_text(
        self,
        expected: TextOrSequence,
        *,
        use_inner_text: bool | None = None,
        ignore_case: bool | None = None,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
    ) -> None:
        """Full-text equality for literals (whitespace-normalized), regex search for patterns."""
        await self._assert_value(
            AssertionKind.HAS_TEXT,
            _text_or_sequence(expected),
            timeout=timeout,
            options=options,
            use_inner_text=use_inner_text,
            ignore_case=ignore_case,
        )

    # ------------------------------------------------------------- attributes

    async def to_have_attribute(
        self,
        name: str,
        value: TextExpectation,
        *,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
    ) -> None:
        await self._assert_value(
            AssertionKind.HAS_ATTRIBUTE, _scalar_text(value), name=name, timeout=timeout, options=options
        )

    async def to_have_css(
        self,
        name: str,
        value: TextExpectation,
        *,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
    ) -> None:
        await self._assert_value(
            AssertionKind.HAS_CSS, _scalar_text(value), name=name, timeout=timeout, options=options
        )

    async def to_have_class(
        self,
        expected: TextOrSequence,
        *,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
    ) -> None:
        await self._assert_value(
            AssertionKind.HAS_CLASS, _text_or_sequence(expected), timeout=timeout, options=options
        )

    async def to_have_count(
        self, count: int, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(f"count must be an int, got {type(count).__name__}")
        await self._assert_value(AssertionKind.HAS_COUNT, to_expectation(count), timeout=timeout, options=options)

    async def to_have_id(
        self, id: TextExpectation, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        await self._assert_value(AssertionKind.HAS_ID, _scalar_text(id), timeout=timeout, options=options)

    async def to_have_js_property(
        self,
        name: str,
        value: Any,
        *,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
    ) -> None:
        await self._assert_value(
            AssertionKind.HAS_JS_PROPERTY,
            to_structured_expectation(value),
            name=name,
            timeout=timeout,
            options=options,
        )

    async def to_have_value(
        self, value: TextExpectation, *, timeout: float | None = None, options: ExpectOptions | None = None
    ) -> None:
        await self._assert_value(AssertionKind.HAS_VALUE, _scalar_text(value), timeout=timeout, options=options)

    # ------------------------------------------------------------ negated aliases

    async def not_to_be_checked(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_be_checked(*args, **kwargs)

    async def not_to_be_editable(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_be_editable(*args, **kwargs)

    async def not_to_be_enabled(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_be_enabled(*args, **kwargs)

    async def not_to_be_disabled(self, **kwargs: Any) -> None:
        await self.not_.to_be_disabled(**kwargs)

    async def not_to_be_empty(self, **kwargs: Any) -> None:
        await self.not_.to_be_empty(**kwargs)

    async def not_to_be_visible(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_be_visible(*args, **kwargs)

    async def not_to_be_hidden(self, **kwargs: Any) -> None:
        await self.not_.to_be_hidden(**kwargs)

    async def not_to_be_focused(self, **kwargs: Any) -> None:
        await self.not_.to_be_focused(**kwargs)

    async def not_to_contain_text(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_contain_text(*args, **kwargs)

    async def not_to_have_text(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_text(*args, **kwargs)

    async def not_to_have_attribute(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_attribute(*args, **kwargs)

    async def not_to_have_css(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_css(*args, **kwargs)

    async def not_to_have_class(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_class(*args, **kwargs)

    async def not_to_have_count(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_count(*args, **kwargs)

    async def not_to_have_id(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_id(*args, **kwargs)

    async def not_to_have_js_property(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_js_property(*args, **kwargs)

    async def not_to_have_value(self, *args: Any, **kwargs: Any) -> None:
        await self.not_.to_have_value(*args, **kwargs)

    # --------------------------------------------------------------- internals

    def _resolve_timeout(self, timeout: float | None, options: ExpectOptions | None) -> float:
        if timeout is not None:
            if timeout < 0:
                raise ValueError("timeout must be >= 0")
            return float(timeout)
        if options is not None and options.timeout is not None:
            return float(options.timeout)
        if self._timeout is not None:
            return float(self._timeout)
        return get_defaults().timeout_ms

    def _resolve_polling(self) -> PollingPolicy:
        return self._polling or get_defaults().polling

    async def _assert_state(
        self,
        kind: AssertionKind,
        expected_state: bool | None,
        timeout: float | None,
        options: ExpectOptions | None,
    ) -> None:
        if expected_state is None:
            if options is not None and options.expected_state is not None:
                expected_state = options.expected_state
            else:
                expected_state = True
        request = AssertionRequest(
            locator=self._locator,
            kind=kind,
            expectation=None,
            negated=self._is_not,
            timeout_ms=self._resolve_timeout(timeout, options),
            polling=self._resolve_polling(),
            expected_state=bool(expected_state),
            message=self._message,
        )
        await self._run(request)

    async def _assert_value(
        self,
        kind: AssertionKind,
        expectation: Expectation,
        *,
        name: str | None = None,
        timeout: float | None = None,
        options: ExpectOptions | None = None,
        use_inner_text: bool | None = None,
        ignore_case: bool | None = None,
    ) -> None:
        if use_inner_text is None:
            use_inner_text = options.use_inner_text if options is not None else False
        if ignore_case is None:
            ignore_case = options.ignore_case if options is not None else False
        request = AssertionRequest(
            locator=self._locator,
            kind=kind,
            expectation=expectation,
            negated=self._is_not,
            timeout_ms=self._resolve_timeout(timeout, options),
            polling=self._resolve_polling(),
            name=name,
            use_inner_text=use_inner_text,
            ignore_case=ignore_case,
            message=self._message,
        )
        await self._run(request)

    def _native_wait(self, backend: LocatorBackend, request: AssertionRequest) -> NativeWait | None:
        if request.kind not in (AssertionKind.VISIBLE, AssertionKind.HIDDEN):
            return None
        if not backend.can(CAPABILITY_WAIT_FOR_STATE):
            return None
        positive = request.expected_state != request.negated
        wants_visible = positive if request.kind is AssertionKind.VISIBLE else not positive
        state: ElementState = "visible" if wants_visible else "hidden"

        async def wait(timeout_ms: float) -> bool:
            return await backend.wait_for_state(request.locator, state, timeout_ms)  # type: ignore[attr-defined]

        return wait

    async def _run(self, request: AssertionRequest) -> None:
        backend = self.backend
        poller = Poller(request.timeout_ms, request.polling)

        async def step() -> StepResult:
            probe_ms = min(DEFAULT_PROBE_TIMEOUT_MS, max(poller.remaining_ms(), request.polling.min_step_timeout_ms))
            query = ObserveQuery(
                kind=request.kind,
                name=request.name,
                multiple=request.multiple,
                use_inner_text=request.use_inner_text,
                probe_timeout_ms=probe_ms,
            )
            try:
                observed = await backend.observe(request.locator, query)
            except NotYetReadyError:
                if not request.negated:
                    raise
                # Nothing to compare against, so the negated expectation holds.
                return StepResult(matched=True, has_value=False)
            matched = evaluate_observation(request, observed)
            return StepResult(matched=matched != request.negated, value=diagnostic_value(request, observed))

        try:
            outcome = await poller.run(step, native_wait=self._native_wait(backend, request))
        except Exception as e:
            failed = PollOutcome(state=PollState.FAILED, attempts=poller.attempts)
            self._emit(request, failed, reason=str(e) or type(e).__name__)
            raise

        record = self._emit(request, outcome, reason="" if outcome.succeeded else "timeout")
        if outcome.succeeded:
            logger.debug("%s passed after %d attempt(s)", request.kind.method_name, outcome.attempts)
            return

        message = format_failure(request, outcome)
        logger.debug("%s timed out after %d attempt(s)", request.kind.method_name, outcome.attempts)
        raise ExpectationFailedError(message, request=request, outcome=outcome, record=record)

    def _emit(self, request: AssertionRequest, outcome: PollOutcome, *, reason: str) -> AssertionRecord:
        record = AssertionRecord(
            kind=request.kind.name.lower(),
            method=request.kind.method_name,
            selector=describe_locator(request.locator),
            negated=request.negated,
            passed=outcome.succeeded,
            expected=expectation_line(request),
            actual=describe_value(outcome.last_value) if outcome.has_value else None,
            timeout_ms=request.timeout_ms,
            attempts=outcome.attempts,
            elapsed_ms=outcome.elapsed_ms,
            reason=reason,
            details={"state": outcome.state.value},
        )
        if self._tracer is not None:
            self._tracer.emit("verification", data={"eventually": True, **record.model_dump()})
        return record


def expect(
    locator: Any,
    *,
    backend: LocatorBackend | None = None,
    tracer: Tracer | None = None,
    timeout: float | None = None,
    message: str | None = None,
    polling: PollingPolicy | None = None,
) -> LocatorAssertions:
    """
    Start a web-first assertion on ``locator``.

    Args:
        locator: Engine locator (a playwright.async_api.Locator by default)
        backend: LocatorBackend used to observe state (default: Playwright)
        tracer: Optional Tracer receiving one "verification" event per assertion
        timeout: Default timeout in milliseconds for assertions on this object
        message: Custom first line for failure messages
        polling: Pause schedule between observations

    Returns:
        LocatorAssertions for chaining, e.g. ``expect(loc).not_.to_be_visible()``
    """
    return LocatorAssertions(
        locator,
        backend=backend,
        tracer=tracer,
        timeout=timeout,
        message=message,
        polling=polling,
    )
