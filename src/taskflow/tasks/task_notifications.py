# src/taskflow/tasks/task_notifications.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..core.ports import NotificationSink
from .task_models import Task
from .task_timer import LiveCounters

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/logo.svg"


class NotificationKind(str, Enum):
    TIME_COMPLETE = "time_complete"
    TASK_COMPLETED = "task_completed"


@dataclass(slots=True, frozen=True)
class NotificationEvent:
    kind: NotificationKind
    task_id: str
    title: str
    body: str
    icon: str


def build_time_complete(task: Task, *, icon: str = DEFAULT_ICON) -> NotificationEvent:
    return NotificationEvent(
        kind=NotificationKind.TIME_COMPLETE,
        task_id=task.id,
        title="Task Time Complete",
        body=f"Estimated time for the active task has been reached: {task.title}",
        icon=icon,
    )


def build_task_completed(task: Task, *, icon: str = DEFAULT_ICON) -> NotificationEvent:
    return NotificationEvent(
        kind=NotificationKind.TASK_COMPLETED,
        task_id=task.id,
        title="Task Completed",
        body=f"Great job! You've completed: {task.title}",
        icon=icon,
    )


class NotificationTrigger:
    """
    Turns countdown ticks and completions into notification events.

    Holds no per-task memory: "time complete" fires on the tick that moves
    the remaining counter onto zero, which can only happen once per span
    because every tick removes exactly one second.

    `enabled` is the caller-controlled alert switch; nothing is emitted
    while it is off.
    """

    def __init__(
        self,
        sink: NotificationSink | None,
        *,
        enabled: bool = True,
        icon: str = DEFAULT_ICON,
    ) -> None:
        self.sink = sink
        self.enabled = bool(enabled)
        self.icon = icon

    def on_tick(self, task: Task | None, counters: LiveCounters) -> NotificationEvent | None:
        if task is None or counters.remaining != 0:
            return None
        return self._emit(build_time_complete(task, icon=self.icon))

    def on_task_completed(self, task: Task) -> NotificationEvent | None:
        return self._emit(build_task_completed(task, icon=self.icon))

    def _emit(self, event: NotificationEvent) -> NotificationEvent | None:
        if not self.enabled:
            logger.debug("Alerts off; dropping %s for task %s", event.kind.value, event.task_id)
            return None
        if self.sink is None:
            return event
        try:
            self.sink.deliver(event.title, event.body, event.icon)
        except Exception:
            logger.exception("Notification delivery failed kind=%s task=%s", event.kind.value, event.task_id)
        else:
            logger.info("Notification %s delivered for task %s", event.kind.value, event.task_id)
        return event
