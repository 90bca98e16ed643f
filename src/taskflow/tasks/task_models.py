# src/taskflow/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    NOT_STARTED -> IN_PROGRESS <-> PAUSED -> COMPLETED (terminal).
    """

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    PAUSED = "Paused"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        key = raw.strip().lower().replace("_", " ").replace("-", " ")
        for member in cls:
            if member.value.lower() == key or member.name.lower().replace("_", " ") == key:
                return member
        raise ValueError(f"unknown status: {raw!r}")


class TaskPriority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        key = raw.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"unknown priority: {raw!r}")


@dataclass(slots=True, frozen=True)
class OpenBreak:
    """A break that is still running (the task is Paused)."""

    started_at: datetime

    def close(self, ended_at: datetime) -> ClosedBreak:
        # A clock that stepped backwards must not produce a negative interval.
        return ClosedBreak(started_at=self.started_at, ended_at=max(ended_at, self.started_at))


@dataclass(slots=True, frozen=True)
class ClosedBreak:
    started_at: datetime
    ended_at: datetime

    @property
    def duration_seconds(self) -> int:
        return int((self.ended_at - self.started_at).total_seconds())


BreakInterval = OpenBreak | ClosedBreak


def normalize_tags(tags) -> tuple[str, ...]:
    """Trim, drop blanks and de-duplicate while keeping first-seen order."""
    out: list[str] = []
    for raw in tags or ():
        tag = str(raw).strip()
        if tag and tag not in out:
            out.append(tag)
    return tuple(out)


@dataclass(slots=True)
class TaskDraft:
    """
    User input for a new task.

    Validation is the caller's job (see validate()); the lifecycle
    controller trusts whatever draft it receives.
    """

    title: str
    estimated_minutes: int
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    due_at: datetime | None = None
    tags: tuple[str, ...] = ()

    def validate(self) -> TaskDraft:
        title = (self.title or "").strip()
        if not title:
            raise ValueError("Task title is required.")
        try:
            minutes = int(self.estimated_minutes)
        except (TypeError, ValueError):
            raise ValueError("Estimated time must be a whole number of minutes.") from None
        if minutes <= 0:
            raise ValueError("Estimated time must be greater than zero.")
        return TaskDraft(
            title=title,
            estimated_minutes=minutes,
            description=(self.description or "").strip(),
            priority=self.priority,
            due_at=self.due_at,
            tags=normalize_tags(self.tags),
        )


def validate_draft(draft: TaskDraft) -> TaskDraft:
    """Caller-side check before create_task; raises ValueError with a user-facing message."""
    return draft.validate()


@dataclass(slots=True)
class Task:
    id: str
    title: str
    description: str
    estimated_minutes: int
    priority: TaskPriority
    status: TaskStatus = TaskStatus.NOT_STARTED

    started_at: datetime | None = None
    completed_at: datetime | None = None

    # Whole seconds of work; only written when leaving IN_PROGRESS.
    active_seconds: int = 0
    breaks: list[BreakInterval] = field(default_factory=list)

    # Start of the current IN_PROGRESS span (first start or latest resume).
    running_since: datetime | None = None

    due_at: datetime | None = None
    tags: tuple[str, ...] = ()

    @property
    def estimated_seconds(self) -> int:
        return self.estimated_minutes * 60

    @property
    def open_break(self) -> OpenBreak | None:
        if self.breaks and isinstance(self.breaks[-1], OpenBreak):
            return self.breaks[-1]
        return None

    @property
    def last_paused_at(self) -> datetime | None:
        ob = self.open_break
        return ob.started_at if ob is not None else None

    @property
    def resume_reference(self) -> datetime | None:
        """
        Start of the current IN_PROGRESS span.

        Falls back to the end of the latest closed break (the last resume),
        and to started_at only for a task that was never paused. Records
        written without runningSince rely on this.
        """
        if self.running_since is not None:
            return self.running_since
        for b in reversed(self.breaks):
            if isinstance(b, ClosedBreak):
                return b.ended_at
        return self.started_at

    @property
    def closed_break_seconds(self) -> int:
        return sum(b.duration_seconds for b in self.breaks if isinstance(b, ClosedBreak))

    @property
    def is_terminal(self) -> bool:
        return self.status == TaskStatus.COMPLETED
