"""Error aggregation keyed by normalized signature."""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

UNDEFINED_ERROR = "UNDEFINED ERROR"


@dataclass
class ErrorRecord:
    """Occurrence count for one error signature."""

    signature: str
    count: int = 1


def error_signature(error: Any) -> str:
    """Return the aggregation key for *error*.

    Exceptions that were raised carry a traceback and are keyed by the full
    formatted trace; an exception that was never raised is keyed by its
    ``Type: message`` line; anything else by ``str()``, or by the default
    object repr when ``str()`` raises.
    """
    if error is None:
        return UNDEFINED_ERROR
    if isinstance(error, BaseException):
        if error.__traceback__ is not None:
            return "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return "".join(traceback.format_exception_only(type(error), error)).strip()
    try:
        return str(error)
    except Exception:
        return object.__repr__(error)


class ErrorAggregator:
    """Count accepted errors per signature until the next flush drains them.

    ``accept`` and ``drain`` hold one lock so that a drain takes exactly the
    records present at that instant; later errors always land in a new batch.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._pending: dict[str, ErrorRecord] = {}
        self._first_error_reported = False

    def accept(self, error: Any) -> bool:
        """Record one occurrence of *error*.

        Returns True when this is the first error since the latch was last
        reset; the caller should then trigger an immediate flush.
        """
        signature = error_signature(error)
        with self._lock:
            record = self._pending.get(signature)
            if record is None:
                self._pending[signature] = ErrorRecord(signature=signature)
            else:
                record.count += 1
            if self._first_error_reported:
                return False
            self._first_error_reported = True
            return True

    def reset_latch(self) -> None:
        """Let the next accepted error trigger an immediate flush again."""
        with self._lock:
            self._first_error_reported = False

    def drain(self) -> list[ErrorRecord]:
        """Take the pending batch and replace it with an empty one."""
        with self._lock:
            batch = list(self._pending.values())
            self._pending = {}
        if batch:
            logger.debug("Drained error batch signatures=%s", len(batch))
        return batch

    def pending(self) -> dict[str, int]:
        """Return a copy of pending counts keyed by signature."""
        with self._lock:
            return {signature: record.count for signature, record in self._pending.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
