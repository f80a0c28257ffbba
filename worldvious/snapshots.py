"""Latest counters and metrics snapshots."""

from __future__ import annotations

from threading import Lock
from typing import Any


class SnapshotStore:
    """Hold the most recent counters and metrics values.

    Values are opaque and replaced wholesale; the periodic reports send
    whatever is current at flush time.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: Any = {}
        self._metrics: Any = {}

    def set_counters(self, value: Any) -> None:
        with self._lock:
            self._counters = value

    def set_metrics(self, value: Any) -> None:
        with self._lock:
            self._metrics = value

    @property
    def counters(self) -> Any:
        with self._lock:
            return self._counters

    @property
    def metrics(self) -> Any:
        with self._lock:
            return self._metrics
