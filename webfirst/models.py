"""
Pydantic models for webfirst assertion options and records.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExpectOptions(BaseModel):
    """
    Per-call assertion options.

    Any field left as None falls back to the value configured on expect(),
    then to the process-wide default (see webfirst.config).
    """

    model_config = ConfigDict(frozen=True)

    timeout: Optional[float] = Field(None, ge=0)  # milliseconds
    use_inner_text: bool = False  # text assertions read innerText instead of textContent
    ignore_case: bool = False  # text assertions only; patterns get re.IGNORECASE
    expected_state: Optional[bool] = None  # checked / editable / enabled / visible flag; None means True


class AssertionRecord(BaseModel):
    """Final outcome of one assertion call, as emitted to the tracer."""

    kind: str
    method: str
    selector: Optional[str] = None
    negated: bool = False
    passed: bool
    expected: Optional[str] = None
    actual: Optional[str] = None
    timeout_ms: float
    attempts: int = 0
    elapsed_ms: float = 0.0
    reason: str = ""
    details: dict[str, Any] = Field(default_factory=dict)
