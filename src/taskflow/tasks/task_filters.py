# src/taskflow/tasks/task_filters.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .task_models import Task, TaskPriority, TaskStatus

ALL = "All"


@dataclass(slots=True, frozen=True)
class TaskFilter:
    """Presentation-only filter. Never mutates tasks."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    search: str = ""

    @property
    def is_filtering(self) -> bool:
        return self.status is not None or self.priority is not None or bool(self.search.strip())

    def clear(self) -> TaskFilter:
        return TaskFilter()

    def matches(self, task: Task) -> bool:
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False

        term = self.search.strip().lower()
        if not term:
            return True
        if term in task.title.lower() or term in task.description.lower():
            return True
        return any(term in tag.lower() for tag in task.tags)

    def describe(self) -> str:
        return (
            f"status={self.status.value if self.status else ALL} "
            f"priority={self.priority.value if self.priority else ALL} "
            f"search={self.search!r}"
        )


def filter_tasks(tasks: Iterable[Task], task_filter: TaskFilter) -> list[Task]:
    return [t for t in tasks if task_filter.matches(t)]


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    groups: dict[TaskStatus, list[Task]] = {s: [] for s in TaskStatus}
    for task in tasks:
        groups[task.status].append(task)
    return groups
