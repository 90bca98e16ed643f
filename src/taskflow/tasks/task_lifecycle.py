# src/taskflow/tasks/task_lifecycle.py

from __future__ import annotations

"""
Lifecycle controller.

The only place where task lifecycle fields change. Every operation runs to
completion before the next one starts (single owner, no locks):

- at most one task is IN_PROGRESS; starting another one pauses it first,
- the clock is sampled only at transitions, and the seconds folded into
  active_seconds are measured from the start of the current running span,
- COMPLETED is terminal and a second complete is a no-op,
- unknown ids and meaningless transitions are silently ignored.
"""

import logging
import uuid
from collections.abc import Callable

from ..core.ports import Clock
from .task_models import OpenBreak, Task, TaskDraft, TaskStatus
from .task_notifications import NotificationTrigger
from .task_store import TaskStore
from .task_timer import LiveCounters, TickDriver

logger = logging.getLogger(__name__)


def _new_task_id() -> str:
    return uuid.uuid4().hex[:8]


class LifecycleController:
    def __init__(
        self,
        store: TaskStore,
        *,
        clock: Clock,
        ticker: TickDriver | None = None,
        trigger: NotificationTrigger | None = None,
        id_factory: Callable[[], str] = _new_task_id,
    ) -> None:
        self.store = store
        self.clock = clock
        self.ticker = ticker or TickDriver()
        self.trigger = trigger
        self._id_factory = id_factory
        self._active_task_id: str | None = None

        self.ticker.add_listener(self._on_tick)

    # ---- reads ----

    @property
    def active_task_id(self) -> str | None:
        return self._active_task_id

    @property
    def active_task(self) -> Task | None:
        if self._active_task_id is None:
            return None
        return self.store.get(self._active_task_id)

    @property
    def counters(self) -> LiveCounters | None:
        return self.ticker.counters

    # ---- helpers ----

    def _clear_active(self, task_id: str) -> None:
        if self._active_task_id == task_id:
            self._active_task_id = None
            self.ticker.stop()

    def _seconds_since(self, since, now) -> int:
        # Truncate to whole seconds; a clock stepping backwards adds nothing.
        return max(0, int((now - since).total_seconds()))

    def _fold_running_span(self, task: Task, now) -> int:
        """Move the in-flight span into active_seconds; returns seconds added."""
        since = task.resume_reference
        added = self._seconds_since(since, now) if since is not None else 0
        task.active_seconds += added
        task.running_since = None
        return added

    def _adopt_running(self, task: Task, now) -> LiveCounters:
        """Make an IN_PROGRESS task the active one without losing its in-flight span."""
        if task.running_since is None:
            task.running_since = task.resume_reference or now
        self._active_task_id = task.id

        # The display includes the span that is still in flight.
        elapsed = task.active_seconds + self._seconds_since(task.running_since, now)
        return self.ticker.start(task.id, elapsed=elapsed, remaining=task.estimated_seconds - elapsed)

    def _on_tick(self, counters: LiveCounters) -> None:
        if self.trigger is None or counters.task_id != self._active_task_id:
            return
        self.trigger.on_tick(self.store.get(counters.task_id), counters)

    # ---- operations ----

    def create_task(self, draft: TaskDraft) -> Task:
        task_id = self._id_factory()
        while task_id in self.store:
            task_id = self._id_factory()

        task = Task(
            id=task_id,
            title=draft.title,
            description=draft.description,
            estimated_minutes=int(draft.estimated_minutes),
            priority=draft.priority,
            due_at=draft.due_at,
            tags=tuple(draft.tags),
        )
        self.store.add(task)
        logger.info("Task created id=%s title=%r estimate=%smin", task.id, task.title, task.estimated_minutes)
        return task

    def start_task(self, task_id: str) -> LiveCounters | None:
        task = self.store.get(task_id)
        if task is None or task.is_terminal:
            logger.debug("start_task ignored id=%s", task_id)
            return None
        if task.status == TaskStatus.IN_PROGRESS and self._active_task_id == task_id:
            return self.ticker.counters

        # Loaded state may hold more than one IN_PROGRESS record.
        for other in self.store.in_progress():
            if other.id != task_id:
                self.pause_task(other.id)

        now = self.clock.now()
        if task.status == TaskStatus.IN_PROGRESS:
            counters = self._adopt_running(task, now)
            logger.info("Task %s adopted as active (active=%ss)", task_id, task.active_seconds)
            self.store.touch(task)
            return counters

        if task.started_at is None:
            task.started_at = now
        open_break = task.open_break
        if open_break is not None:
            task.breaks[-1] = open_break.close(now)

        task.status = TaskStatus.IN_PROGRESS
        task.running_since = now
        self._active_task_id = task_id

        counters = self.ticker.start(
            task_id,
            elapsed=task.active_seconds,
            remaining=task.estimated_seconds - task.active_seconds,
        )
        logger.info("Task %s -> in progress (active=%ss)", task_id, task.active_seconds)
        self.store.touch(task)
        return counters

    def pause_task(self, task_id: str) -> bool:
        task = self.store.get(task_id)
        if task is None or task.status != TaskStatus.IN_PROGRESS:
            logger.debug("pause_task ignored id=%s", task_id)
            return False

        now = self.clock.now()
        added = self._fold_running_span(task, now)
        task.breaks.append(OpenBreak(started_at=now))
        task.status = TaskStatus.PAUSED

        self._clear_active(task_id)
        logger.info("Task %s -> paused (+%ss, active=%ss)", task_id, added, task.active_seconds)
        self.store.touch(task)
        return True

    def complete_task(self, task_id: str) -> bool:
        task = self.store.get(task_id)
        if task is None or task.status not in (TaskStatus.IN_PROGRESS, TaskStatus.PAUSED):
            logger.debug("complete_task ignored id=%s", task_id)
            return False

        now = self.clock.now()
        if task.status == TaskStatus.IN_PROGRESS:
            self._fold_running_span(task, now)
        open_break = task.open_break
        if open_break is not None:
            task.breaks[-1] = open_break.close(now)

        task.status = TaskStatus.COMPLETED
        task.completed_at = now
        task.running_since = None

        was_active = self._active_task_id == task_id
        self._clear_active(task_id)
        logger.info("Task %s -> completed (active=%ss)", task_id, task.active_seconds)
        self.store.touch(task)

        if was_active and self.trigger is not None:
            self.trigger.on_task_completed(task)
        return True

    def delete_task(self, task_id: str) -> bool:
        self._clear_active(task_id)
        removed = self.store.remove(task_id)
        if removed is None:
            logger.debug("delete_task ignored id=%s", task_id)
            return False
        logger.info("Task %s deleted", task_id)
        return True

    # ---- restart support ----

    def restore_active(self) -> str | None:
        """
        Re-adopt a task persisted as IN_PROGRESS (e.g. after a crash).

        If several are found, the most recently resumed one stays active and
        the others are paused.
        """
        running = self.store.in_progress()
        if not running:
            return None

        now = self.clock.now()
        running.sort(key=lambda t: t.resume_reference or now)
        keep = running[-1]
        for task in running[:-1]:
            self.pause_task(task.id)

        self._adopt_running(keep, now)
        logger.info("Restored active task %s", keep.id)
        return keep.id

    def pause_active(self) -> bool:
        if self._active_task_id is None:
            return False
        return self.pause_task(self._active_task_id)
