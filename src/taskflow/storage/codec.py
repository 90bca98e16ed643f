# src/taskflow/storage/codec.py

"""
Record codec for persisted tasks.

Timestamps are written as ISO-8601 strings and always come back as
datetime objects; the lifecycle core never sees raw date strings.
Naive timestamps found in old records are read as UTC.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..tasks.task_models import (
    BreakInterval,
    ClosedBreak,
    OpenBreak,
    Task,
    TaskPriority,
    TaskStatus,
    normalize_tags,
)

logger = logging.getLogger(__name__)


def dt_to_str(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def str_to_dt(raw: Any) -> datetime | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        text = str(raw).strip()
        # JS-style "Z" suffix
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def break_to_record(b: BreakInterval) -> dict[str, Any]:
    return {
        "startTime": dt_to_str(b.started_at),
        "endTime": dt_to_str(b.ended_at) if isinstance(b, ClosedBreak) else None,
    }


def record_to_break(rec: dict[str, Any]) -> BreakInterval:
    started = str_to_dt(rec.get("startTime"))
    if started is None:
        raise ValueError("break without startTime")
    ended = str_to_dt(rec.get("endTime"))
    if ended is None:
        return OpenBreak(started_at=started)
    return ClosedBreak(started_at=started, ended_at=ended)


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "estimatedTime": task.estimated_minutes,
        "status": task.status.value,
        "priority": task.priority.value,
        "startTime": dt_to_str(task.started_at),
        "completionTime": dt_to_str(task.completed_at),
        "activeTime": task.active_seconds,
        "breakDurations": [break_to_record(b) for b in task.breaks],
        "lastPausedAt": dt_to_str(task.last_paused_at),
        "runningSince": dt_to_str(task.running_since),
        "dueDate": dt_to_str(task.due_at),
        "tags": list(task.tags),
    }


def record_to_task(rec: dict[str, Any]) -> Task:
    task_id = str(rec.get("id") or "").strip()
    if not task_id:
        raise ValueError("task record without id")

    breaks = [record_to_break(b) for b in rec.get("breakDurations") or [] if isinstance(b, dict)]
    # Only the last break may be open.
    for i, b in enumerate(breaks[:-1]):
        if isinstance(b, OpenBreak):
            raise ValueError(f"task {task_id}: open break at position {i} is not the last one")

    task = Task(
        id=task_id,
        title=str(rec.get("title") or ""),
        description=str(rec.get("description") or ""),
        estimated_minutes=int(rec.get("estimatedTime") or 0),
        priority=TaskPriority.parse(rec.get("priority")),
        status=TaskStatus.parse(rec.get("status")),
        started_at=str_to_dt(rec.get("startTime")),
        completed_at=str_to_dt(rec.get("completionTime")),
        active_seconds=max(0, int(rec.get("activeTime") or 0)),
        breaks=breaks,
        running_since=str_to_dt(rec.get("runningSince")),
        due_at=str_to_dt(rec.get("dueDate")),
        tags=normalize_tags(rec.get("tags") or ()),
    )
    _reconcile_breaks(task, str_to_dt(rec.get("lastPausedAt")))
    return task


def _reconcile_breaks(task: Task, last_paused_at: datetime | None) -> None:
    """
    Make status and breaks agree: only a PAUSED task has an open break.

    - COMPLETED with an open break: the break is closed at completion time.
    - any other status with an open break: the task is read as PAUSED.
    - PAUSED without an open break: a break is opened at lastPausedAt, or at
      the last known resume; with no timestamps at all the task is read as
      NOT_STARTED.
    """
    open_break = task.open_break

    if open_break is not None and task.status == TaskStatus.COMPLETED:
        logger.warning("Task %s: completed with an open break; closing it", task.id)
        task.breaks[-1] = open_break.close(task.completed_at or open_break.started_at)
        return

    if open_break is not None and task.status != TaskStatus.PAUSED:
        logger.warning("Task %s: %s with an open break; reading it as paused", task.id, task.status.value)
        task.status = TaskStatus.PAUSED
        task.running_since = None
        return

    if open_break is None and task.status == TaskStatus.PAUSED:
        paused_at = last_paused_at or task.resume_reference
        if paused_at is None:
            logger.warning("Task %s: paused without any timestamps; reading it as not started", task.id)
            task.status = TaskStatus.NOT_STARTED
            return
        logger.warning("Task %s: paused without an open break; opening one at %s", task.id, paused_at.isoformat())
        task.breaks.append(OpenBreak(started_at=paused_at))
        task.running_since = None


def decode_tasks(records: list[dict[str, Any]]) -> list[Task]:
    """Decode records, skipping (and logging) malformed ones."""
    out: list[Task] = []
    for rec in records:
        if not isinstance(rec, dict):
            continue
        try:
            out.append(record_to_task(rec))
        except Exception:
            logger.warning("Skipping malformed task record id=%r", rec.get("id"), exc_info=True)
    return out


def encode_tasks(tasks) -> list[dict[str, Any]]:
    return [task_to_record(t) for t in tasks]
