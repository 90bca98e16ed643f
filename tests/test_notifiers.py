# tests/test_notifiers.py

from __future__ import annotations

import asyncio
import logging

import pytest

from taskflow.connectors.notifiers import ConsoleNotifier, FanoutNotifier, MatrixNotifier
from taskflow.tasks.task_models import Task, TaskPriority
from taskflow.tasks.task_notifications import NotificationTrigger

from .fakes import RecordingSink


class _BrokenSink:
    def deliver(self, title: str, body: str, icon: str) -> None:
        raise RuntimeError("speaker unplugged")


class FakeMatrixClient:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict]] = []
        self.closed = False

    async def room_send(self, *, room_id: str, message_type: str, content: dict) -> None:
        self.sent.append((room_id, content))

    async def close(self) -> None:
        self.closed = True


def test_console_notifier_prints_alert() -> None:
    lines: list[str] = []
    ConsoleNotifier(lines.append, bell=False).deliver("Task Completed", "Great job!", "/logo.svg")
    assert len(lines) == 1
    assert "[ALERT] Task Completed: Great job!" in lines[0]


def test_fanout_survives_a_failing_sink() -> None:
    good = RecordingSink()
    fanout = FanoutNotifier([_BrokenSink(), good])
    fanout.deliver("t", "b", "i")
    assert good.titles() == ["t"]


@pytest.mark.asyncio
async def test_matrix_notifier_posts_notice() -> None:
    client = FakeMatrixClient()
    notifier = MatrixNotifier(client, "!room:example.org")

    notifier.deliver("Task Time Complete", "Estimated time reached", "/logo.svg")
    await asyncio.sleep(0)
    await notifier.aclose()

    assert client.sent == [
        ("!room:example.org", {"msgtype": "m.notice", "body": "Task Time Complete\nEstimated time reached"})
    ]
    assert client.closed


def test_matrix_notifier_without_loop_drops_alert() -> None:
    client = FakeMatrixClient()
    MatrixNotifier(client, "!room:example.org").deliver("t", "b", "i")
    assert client.sent == []


def test_trigger_logs_delivery_only_when_the_sink_succeeds(caplog) -> None:
    task = Task(id="n1", title="Ship it", description="", estimated_minutes=1, priority=TaskPriority.MEDIUM)
    caplog.set_level(logging.INFO, logger="taskflow.tasks.task_notifications")

    event = NotificationTrigger(_BrokenSink()).on_task_completed(task)
    assert event is not None
    assert "delivery failed" in caplog.text
    assert "delivered for task" not in caplog.text

    caplog.clear()
    NotificationTrigger(RecordingSink()).on_task_completed(task)
    assert "Notification task_completed delivered for task n1" in caplog.text
