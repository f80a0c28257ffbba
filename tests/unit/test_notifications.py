"""Unit tests for notification parsing and listener fan-out."""

from __future__ import annotations

import pytest

from tests.collector import FEEDBACK_ITEM, NEW_VERSION_ITEM
from worldvious.notifications import (
    FeedbackRequestNotification,
    NewVersionNotification,
    NotificationCenter,
    describe_notification,
    parse_notifications,
)


class TestParseNotifications:
    def test_parses_both_variants(self) -> None:
        items = parse_notifications({"notifications": [NEW_VERSION_ITEM, FEEDBACK_ITEM]})
        assert len(items) == 2
        version, feedback = items
        assert isinstance(version, NewVersionNotification)
        assert version.name == "Kubevious"
        assert version.version == "v1.2.3"
        assert version.changes == ("change-1", "change-2", "change-3")
        assert isinstance(feedback, FeedbackRequestNotification)
        assert feedback.questions[0].id == "ease-of-use"
        assert feedback.questions[0].kind == "rate"

    @pytest.mark.parametrize("payload", [{}, {"notifications": None}, {"notifications": "x"}, None, []])
    def test_missing_array_yields_empty_state(self, payload) -> None:  # type: ignore[no-untyped-def]
        assert parse_notifications(payload) == ()

    def test_malformed_and_unknown_items_are_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        items = parse_notifications(
            {
                "notifications": [
                    {"kind": "new-version", "name": "Kubevious"},
                    {"kind": "survey", "id": "1"},
                    "garbage",
                    FEEDBACK_ITEM,
                ]
            }
        )
        assert len(items) == 1
        assert isinstance(items[0], FeedbackRequestNotification)
        assert "Skipping malformed notification" in caplog.text

    def test_question_extra_fields_are_kept(self) -> None:
        raw = dict(FEEDBACK_ITEM)
        raw["questions"] = [{"id": "q", "kind": "single-select", "text": "Pick", "options": ["a", "b"]}]
        (item,) = parse_notifications({"notifications": [raw]})
        assert isinstance(item, FeedbackRequestNotification)
        assert item.questions[0].model_extra == {"options": ["a", "b"]}

    def test_describe_notification(self) -> None:
        version, feedback = parse_notifications({"notifications": [NEW_VERSION_ITEM, FEEDBACK_ITEM]})
        assert "v1.2.3" in describe_notification(version)
        assert "questions=1" in describe_notification(feedback)


class TestNotificationCenter:
    def test_subscribe_receives_catch_up_call(self) -> None:
        center = NotificationCenter()
        calls: list[tuple] = []
        center.subscribe(calls.append)
        assert calls == [()]

        center.replace(parse_notifications({"notifications": [NEW_VERSION_ITEM]}))
        late: list[tuple] = []
        center.subscribe(late.append)
        assert len(late) == 1
        assert isinstance(late[0][0], NewVersionNotification)

    def test_replace_is_wholesale_and_fans_out(self) -> None:
        center = NotificationCenter()
        calls: list[tuple] = []
        center.subscribe(calls.append)
        center.replace(parse_notifications({"notifications": [NEW_VERSION_ITEM, FEEDBACK_ITEM]}))
        center.replace(())
        assert [len(items) for items in calls] == [0, 2, 0]
        assert center.items == ()

    def test_failing_listener_is_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        center = NotificationCenter()
        received: list[tuple] = []

        def _broken(_items) -> None:  # type: ignore[no-untyped-def]
            raise RuntimeError("listener broke")

        center.subscribe(_broken)
        center.subscribe(received.append)
        center.replace(parse_notifications({"notifications": [FEEDBACK_ITEM]}))
        assert len(received) == 2
        assert center.listener_count == 2
        assert "listener broke" in caplog.text

    def test_non_callable_listener_rejected(self) -> None:
        with pytest.raises(TypeError):
            NotificationCenter().subscribe("not callable")  # type: ignore[arg-type]

    def test_async_listener_outside_loop_runs_to_completion(self) -> None:
        center = NotificationCenter()
        received: list[tuple] = []

        async def _listener(items) -> None:  # type: ignore[no-untyped-def]
            received.append(items)

        center.subscribe(_listener)
        assert received == [()]

    @pytest.mark.asyncio
    async def test_async_listener_failure_is_isolated(self, caplog: pytest.LogCaptureFixture) -> None:
        center = NotificationCenter()
        received: list[tuple] = []

        async def _broken(_items) -> None:  # type: ignore[no-untyped-def]
            raise ValueError("async listener broke")

        async def _ok(items) -> None:  # type: ignore[no-untyped-def]
            received.append(items)

        center.subscribe(_broken)
        center.subscribe(_ok)
        center.replace(parse_notifications({"notifications": [NEW_VERSION_ITEM]}))
        await center.wait_for_deliveries()
        assert [len(items) for items in received] == [0, 1]
        assert "async listener broke" in caplog.text
