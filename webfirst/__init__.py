"""
webfirst: auto-retrying ("web-first") assertions for remote browser locators.

    from playwright.async_api import async_playwright
    from webfirst import expect

    async with async_playwright() as p:
        browser = await p.chromium.launch()
        page = await browser.new_page()
        await page.set_content("<div id=node>Text content</div>")
        await expect(page.locator("#node")).to_have_text("Text content")
"""

from .assertions import AssertionRequest, LocatorAssertions, expect
from .config import get_default_timeout, reset_defaults, set_default_polling, set_default_timeout
from .errors import ExpectationFailedError, NotYetReadyError, StructuralFaultError, WebFirstError
from .expectations import (
    Expectation,
    Literal,
    LiteralSequence,
    Numeric,
    Pattern,
    PatternSequence,
    StructuredValue,
    to_expectation,
    to_structured_expectation,
)
from .kinds import AssertionKind
from .matching import MatchMode, match
from .models import AssertionRecord, ExpectOptions
from .normalize import normalize_structured, normalize_text, structures_equal
from .polling import Poller, PollingPolicy, PollOutcome, PollState, StepResult
from .tracing import JsonlTraceSink, MemoryTraceSink, Tracer, TraceSink

__version__ = "0.1.0"

__all__ = [
    # Facade
    "expect",
    "LocatorAssertions",
    "AssertionRequest",
    "AssertionKind",
    "ExpectOptions",
    "AssertionRecord",
    # Defaults
    "get_default_timeout",
    "set_default_timeout",
    "set_default_polling",
    "reset_defaults",
    # Errors
    "WebFirstError",
    "NotYetReadyError",
    "StructuralFaultError",
    "ExpectationFailedError",
    # Expectations
    "Expectation",
    "Literal",
    "Pattern",
    "LiteralSequence",
    "PatternSequence",
    "Numeric",
    "StructuredValue",
    "to_expectation",
    "to_structured_expectation",
    # Matching / normalization
    "MatchMode",
    "match",
    "normalize_text",
    "normalize_structured",
    "structures_equal",
    # Polling
    "Poller",
    "PollingPolicy",
    "PollOutcome",
    "PollState",
    "StepResult",
    # Tracing
    "Tracer",
    "TraceSink",
    "JsonlTraceSink",
    "MemoryTraceSink",
]
