# src/taskflow/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

ChangeListener = Callable[["TaskStore"], None]


class TaskStore:
    """
    In-memory authoritative task collection.

    Holds records in insertion order and notifies listeners after every
    mutation. It has no lifecycle behaviour of its own: all transitions go
    through LifecycleController, which calls touch() once it has finished
    mutating a record.
    """

    def __init__(self, tasks: Iterable[Task] | None = None) -> None:
        self._tasks: dict[str, Task] = {}
        self._listeners: list[ChangeListener] = []
        for task in tasks or ():
            self._tasks[task.id] = task

    # ---- listeners ----

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("TaskStore listener failed: %r", listener)

    # ---- reads ----

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def get(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def in_progress(self) -> list[Task]:
        return [t for t in self._tasks.values() if t.status == TaskStatus.IN_PROGRESS]

    # ---- writes ----

    def add(self, task: Task) -> None:
        if task.id in self._tasks:
            raise ValueError(f"duplicate task id: {task.id}")
        self._tasks[task.id] = task
        logger.debug("Task added id=%s title=%r", task.id, task.title)
        self._notify()

    def remove(self, task_id: str) -> Task | None:
        task = self._tasks.pop(task_id, None)
        if task is not None:
            logger.debug("Task removed id=%s", task_id)
            self._notify()
        return task

    def touch(self, task: Task) -> None:
        """Signal that a record held by the store was mutated in place."""
        if task.id not in self._tasks:
            return
        self._notify()
