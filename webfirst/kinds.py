"""Assertion kinds and their public method names."""

from __future__ import annotations

from enum import Enum


class AssertionKind(Enum):
    CHECKED = "to_be_checked"
    EDITABLE = "to_be_editable"
    ENABLED = "to_be_enabled"
    DISABLED = "to_be_disabled"
    EMPTY = "to_be_empty"
    VISIBLE = "to_be_visible"
    HIDDEN = "to_be_hidden"
    FOCUSED = "to_be_focused"
    CONTAINS_TEXT = "to_contain_text"
    HAS_TEXT = "to_have_text"
    HAS_ATTRIBUTE = "to_have_attribute"
    HAS_CSS = "to_have_css"
    HAS_CLASS = "to_have_class"
    HAS_COUNT = "to_have_count"
    HAS_ID = "to_have_id"
    HAS_JS_PROPERTY = "to_have_js_property"
    HAS_VALUE = "to_have_value"

    @property
    def method_name(self) -> str:
        return self.value

    @property
    def is_state(self) -> bool:
        return self in STATE_KINDS

    @property
    def state_word(self) -> str:
        """'checked' for CHECKED, 'visible' for VISIBLE, ..."""
        return self.value[len("to_be_") :]


STATE_KINDS = frozenset(
    {
        AssertionKind.CHECKED,
        AssertionKind.EDITABLE,
        AssertionKind.ENABLED,
        AssertionKind.DISABLED,
        AssertionKind.EMPTY,
        AssertionKind.VISIBLE,
        AssertionKind.HIDDEN,
        AssertionKind.FOCUSED,
    }
)

# Kinds whose literal expectations go through normalize_text().
NORMALIZED_TEXT_KINDS = frozenset(
    {
        AssertionKind.CONTAINS_TEXT,
        AssertionKind.HAS_TEXT,
        AssertionKind.HAS_VALUE,
        AssertionKind.HAS_CLASS,
    }
)
