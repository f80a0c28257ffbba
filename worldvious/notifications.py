"""Notification wire models and listener fan-out."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from threading import Lock
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class FeedbackQuestion(BaseModel):
    """One question of a feedback request."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    kind: str
    text: str = ""


class NewVersionNotification(BaseModel):
    """A newer release of the reporting process is available."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["new-version"] = "new-version"
    name: str
    version: str
    url: str
    changes: tuple[str, ...] = ()
    features: tuple[str, ...] = ()


class FeedbackRequestNotification(BaseModel):
    """The collector asks the user to answer a short questionnaire."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["feedback-request"] = "feedback-request"
    id: str
    questions: tuple[FeedbackQuestion, ...] = ()


NotificationItem = Annotated[
    Union[NewVersionNotification, FeedbackRequestNotification],
    Field(discriminator="kind"),
]
NotificationListener = Callable[[tuple[NotificationItem, ...]], Any]

_ITEM_ADAPTER: TypeAdapter[NotificationItem] = TypeAdapter(NotificationItem)


def parse_notifications(payload: Any) -> tuple[NotificationItem, ...]:
    """Parse the ``notifications`` array of a version-check response.

    Items that fail validation (unknown kind, missing fields) are skipped.
    """
    raw_items = payload.get("notifications") if isinstance(payload, dict) else None
    if not isinstance(raw_items, list):
        return ()
    items: list[NotificationItem] = []
    for raw in raw_items:
        try:
            items.append(_ITEM_ADAPTER.validate_python(raw))
        except ValidationError as exc:
            logger.warning("Skipping malformed notification item=%r: %s", raw, exc.errors(include_url=False))
    return tuple(items)


def describe_notification(item: NotificationItem) -> str:
    """Return a one-line human readable summary of *item*."""
    if isinstance(item, NewVersionNotification):
        return f"new version {item.name} {item.version} available at {item.url}"
    if isinstance(item, FeedbackRequestNotification):
        return f"feedback requested id={item.id} questions={len(item.questions)}"
    raise TypeError(f"Unsupported notification type: {type(item).__name__}")


class NotificationCenter:
    """Hold the latest notifications and deliver them to listeners.

    New listeners get a synchronous catch-up call with the current state.
    A failing listener, sync or async, is logged and does not affect the
    others.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._items: tuple[NotificationItem, ...] = ()
        self._listeners: list[NotificationListener] = []
        self._pending_deliveries: set[asyncio.Task[None]] = set()

    @property
    def items(self) -> tuple[NotificationItem, ...]:
        with self._lock:
            return self._items

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def subscribe(self, listener: NotificationListener) -> None:
        """Register *listener* and call it once with the current state."""
        if not callable(listener):
            raise TypeError("listener must be callable")
        with self._lock:
            self._listeners.append(listener)
            items = self._items
        self._deliver(listener, items)

    def replace(self, items: Iterable[NotificationItem]) -> None:
        """Replace the state wholesale and notify every listener."""
        new_items = tuple(items)
        for item in new_items:
            logger.info("Notification: %s", describe_notification(item))
        with self._lock:
            self._items = new_items
            listeners = list(self._listeners)
        for listener in listeners:
            self._deliver(listener, new_items)

    async def wait_for_deliveries(self) -> None:
        """Wait for asynchronous listener results that are still pending."""
        if self._pending_deliveries:
            await asyncio.gather(*self._pending_deliveries, return_exceptions=True)

    def _deliver(self, listener: NotificationListener, items: tuple[NotificationItem, ...]) -> None:
        try:
            result = listener(items)
        except Exception as exc:
            logger.exception("Notification listener %r failed: %s", listener, exc)
            return
        if not inspect.isawaitable(result):
            return
        watcher = self._watch(listener, result)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(watcher)
            return
        task = loop.create_task(watcher)
        self._pending_deliveries.add(task)
        task.add_done_callback(self._pending_deliveries.discard)

    @staticmethod
    async def _watch(listener: NotificationListener, result: Awaitable[Any]) -> None:
        try:
            await result
        except Exception as exc:
            logger.error("Notification listener %r failed: %s", listener, exc, exc_info=True)
