"""
Playwright backend: observes locator state through the async Locator API.

    from playwright.async_api import async_playwright
    from webfirst import expect
    from webfirst.backends import PlaywrightLocatorBackend

    backend = PlaywrightLocatorBackend()
    await expect(page.locator("#node"), backend=backend).to_have_text("Text content")

Playwright TimeoutError (element not attached within the probe window) is
reported as NotYetReadyError; every other Playwright error is a
StructuralFaultError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import NotYetReadyError, StructuralFaultError
from ..kinds import AssertionKind
from .protocol import CAPABILITY_WAIT_FOR_STATE, ElementState, ObserveQuery

if TYPE_CHECKING:
    from playwright.async_api import Locator

logger = logging.getLogger(__name__)

_IS_EMPTY_JS = """
(e) => {
    if (e instanceof HTMLInputElement || e instanceof HTMLTextAreaElement) {
        return !e.value;
    }
    return !(e.textContent || '').trim();
}
"""

_IS_FOCUSED_JS = "(e) => e === e.ownerDocument.activeElement"

_COMPUTED_STYLE_JS = """
(e, name) => {
    const style = window.getComputedStyle(e);
    return style.getPropertyValue(name) || style[name] || '';
}
"""

_ID_JS = "(e) => e.id"

_JS_PROPERTY_JS = "(e, name) => e[name]"

_ALL_CLASSES_JS = "(elements) => elements.map(e => e.getAttribute('class') || '')"


class PlaywrightLocatorBackend:
    """LocatorBackend over playwright.async_api.Locator."""

    def can(self, capability: str) -> bool:
        return capability == CAPABILITY_WAIT_FOR_STATE

    async def observe(self, locator: Locator, query: ObserveQuery) -> Any:
        try:
            return await self._observe(locator, query)
        except PlaywrightTimeoutError as e:
            raise NotYetReadyError(e.message) from e
        except PlaywrightError as e:
            raise StructuralFaultError(f"{query.kind.method_name}: {e.message}", cause=e) from e

    async def wait_for_state(self, locator: Locator, state: ElementState, timeout_ms: float) -> bool:
        if timeout_ms <= 0:
            # Playwright reads timeout=0 as "wait forever".
            return False
        try:
            await locator.wait_for(state=state, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return False
        except PlaywrightError as e:
            raise StructuralFaultError(f"wait_for({state}): {e.message}", cause=e) from e
        return True

    async def _observe(self, locator: Locator, query: ObserveQuery) -> Any:
        kind = query.kind
        timeout = query.probe_timeout_ms

        if kind is AssertionKind.CHECKED:
            return await locator.is_checked(timeout=timeout)
        if kind is AssertionKind.EDITABLE:
            return await locator.is_editable(timeout=timeout)
        if kind is AssertionKind.ENABLED:
            return await locator.is_enabled(timeout=timeout)
        if kind is AssertionKind.DISABLED:
            return await locator.is_disabled(timeout=timeout)
        if kind is AssertionKind.VISIBLE:
            return await locator.is_visible()
        if kind is AssertionKind.HIDDEN:
            return await locator.is_hidden()
        if kind is AssertionKind.EMPTY:
            return await locator.evaluate(_IS_EMPTY_JS, timeout=timeout)
        if kind is AssertionKind.FOCUSED:
            return await locator.evaluate(_IS_FOCUSED_JS, timeout=timeout)

        if kind in (AssertionKind.CONTAINS_TEXT, AssertionKind.HAS_TEXT):
            return await self._observe_text(locator, query)

        if kind is AssertionKind.HAS_ATTRIBUTE:
            value = await locator.get_attribute(self._require_name(query), timeout=timeout)
            if value is None:
                raise NotYetReadyError(f"attribute {query.name!r} is absent")
            return value
        if kind is AssertionKind.HAS_CSS:
            return await locator.evaluate(_COMPUTED_STYLE_JS, self._require_name(query), timeout=timeout)
        if kind is AssertionKind.HAS_CLASS:
            if query.multiple:
                return await locator.evaluate_all(_ALL_CLASSES_JS)
            return await locator.get_attribute("class", timeout=timeout) or ""
        if kind is AssertionKind.HAS_COUNT:
            return await locator.count()
        if kind is AssertionKind.HAS_ID:
            return await locator.evaluate(_ID_JS, timeout=timeout)
        if kind is AssertionKind.HAS_JS_PROPERTY:
            return await locator.evaluate(_JS_PROPERTY_JS, self._require_name(query), timeout=timeout)
        if kind is AssertionKind.HAS_VALUE:
            return await locator.input_value(timeout=timeout)

        raise ValueError(f"unsupported assertion kind: {kind}")

    async def _observe_text(self, locator: Locator, query: ObserveQuery) -> Any:
        if query.multiple:
            if query.use_inner_text:
                return await locator.all_inner_texts()
            return await locator.all_text_contents()
        if query.use_inner_text:
            return await locator.inner_text(timeout=query.probe_timeout_ms)
        return await locator.text_content(timeout=query.probe_timeout_ms) or ""

    @staticmethod
    def _require_name(query: ObserveQuery) -> str:
        if not query.name:
            raise ValueError(f"{query.kind.method_name} requires a name")
        return query.name
