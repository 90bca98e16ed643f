# src/taskflow/tasks/task_stats.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from .task_models import Task, TaskStatus

DUE_SOON_WINDOW = timedelta(hours=1)


@dataclass(slots=True, frozen=True)
class TaskStats:
    total_tasks: int = 0
    completed_tasks: int = 0
    total_estimated_minutes: int = 0
    total_active_seconds: int = 0
    total_break_seconds: int = 0

    @property
    def completion_rate(self) -> int:
        """Completed share in whole percent (0 for an empty store)."""
        if self.total_tasks <= 0:
            return 0
        return round(self.completed_tasks / self.total_tasks * 100)


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    """
    Recompute totals over the whole collection.

    Open breaks contribute nothing to total_break_seconds until they close.
    """
    total = completed = estimated = active = breaks = 0
    for task in tasks:
        total += 1
        if task.status == TaskStatus.COMPLETED:
            completed += 1
        estimated += task.estimated_minutes
        active += task.active_seconds
        breaks += task.closed_break_seconds

    return TaskStats(
        total_tasks=total,
        completed_tasks=completed,
        total_estimated_minutes=estimated,
        total_active_seconds=active,
        total_break_seconds=breaks,
    )


def live_active_seconds(task: Task, now: datetime) -> int:
    """Stored active time plus the span still in flight for a running task."""
    if task.status != TaskStatus.IN_PROGRESS:
        return task.active_seconds
    since = task.resume_reference
    if since is None:
        return task.active_seconds
    return task.active_seconds + max(0, int((now - since).total_seconds()))


def is_overdue(task: Task, now: datetime) -> bool:
    if task.due_at is None or task.is_terminal:
        return False
    return now > task.due_at


def is_due_soon(task: Task, now: datetime) -> bool:
    """Due strictly within the next hour; an overdue task is not "due soon"."""
    if task.due_at is None or task.is_terminal:
        return False
    left = task.due_at - now
    return timedelta(0) < left < DUE_SOON_WINDOW


def due_label(task: Task, now: datetime) -> str:
    if is_overdue(task, now):
        return "overdue"
    if is_due_soon(task, now):
        return "due soon"
    return ""


def format_duration(seconds: int) -> str:
    """HH:MM:SS; hours are not wrapped at 24."""
    seconds = abs(int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_remaining(remaining: int) -> tuple[str, str]:
    """Return (label, value) for the countdown: Remaining, or Overtime once at/below zero."""
    if remaining <= 0:
        return "Overtime", "+" + format_duration(remaining)
    return "Remaining", format_duration(remaining)


def progress_percent(elapsed: int, estimated_seconds: int) -> float:
    if estimated_seconds <= 0:
        return 100.0
    return min(100.0, max(0.0, elapsed / estimated_seconds * 100))
