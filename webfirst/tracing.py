"""
Trace event emission for assertion outcomes.

    from webfirst.tracing import JsonlTraceSink, Tracer

    tracer = Tracer(run_id="checkout-tests", sink=JsonlTraceSink("trace.jsonl"))
    await expect(page.locator("#total"), tracer=tracer).to_have_text("$10.00")
    tracer.close()

Tracing must never change an assertion's result: sink failures are logged
and swallowed.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TraceSink(ABC):
    @abstractmethod
    def emit(self, event: dict[str, Any]) -> None:
        """Persist one trace event."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources."""


class MemoryTraceSink(TraceSink):
    """Keeps events in a list; handy in tests."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def emit(self, event: dict[str, Any]) -> None:
        self.events.append(event)

    def close(self) -> None:
        return


class JsonlTraceSink(TraceSink):
    """
    Appends one JSON object per line.

    Writes are synchronous and flushed per event, so they run on the calling
    event loop. Events are small and arrive once per assertion; for very
    large parallel suites use a sink that buffers or writes off-thread.
    Safe to share across threads: each line is written under a lock.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._fh = open(self.path, "a", encoding="utf-8")

    def emit(self, event: dict[str, Any]) -> None:
        line = json.dumps(event, default=str)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.close()


class Tracer:
    def __init__(self, run_id: str, sink: TraceSink) -> None:
        self.run_id = run_id
        self.sink = sink

    def emit(self, event_type: str, data: dict[str, Any], step_id: str | None = None) -> None:
        event = {
            "v": 1,
            "type": event_type,
            "ts": int(time.time() * 1000),
            "run_id": self.run_id,
            "step_id": step_id,
            "data": data,
        }
        try:
            self.sink.emit(event)
        except Exception as e:
            logger.warning("trace sink %s failed to emit %s: %s", type(self.sink).__name__, event_type, e)

    def close(self) -> None:
        self.sink.close()
