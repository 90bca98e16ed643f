# src/taskflow/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..tasks.task_filters import TaskFilter, filter_tasks, group_by_status
from ..tasks.task_models import Task, TaskDraft, TaskPriority, TaskStatus, validate_draft
from ..tasks.task_stats import due_label, format_duration, format_remaining, live_active_seconds, progress_percent

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /start, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Could not parse command: {e}"
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."
        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _local(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def resolve_task_id(state: AppState, token: str | None) -> str | None:
    """Exact id, or a unique id prefix. Unknown input is passed through unchanged."""
    if not token:
        return None
    if token in state.store:
        return token
    matches = [t.id for t in state.store if t.id.startswith(token)]
    if len(matches) == 1:
        return matches[0]
    return token


def window_title(state: AppState) -> str:
    app_name = str(getattr(state.settings, "app_name", "taskflow"))
    task = state.controller.active_task
    counters = state.controller.counters
    if task is None or task.status != TaskStatus.IN_PROGRESS or counters is None:
        return f"{app_name} | Smart Task Management"
    return f"({format_duration(counters.elapsed)}) {task.title} - {app_name}"


def render_task_line(state: AppState, task: Task) -> str:
    now = state.controller.clock.now()
    marker = "*" if task.id == state.controller.active_task_id else " "
    tags = f" [{', '.join(task.tags)}]" if task.tags else ""
    due = f" due {_due_text(task, now)}" if task.due_at else ""
    return (
        f"{marker} {task.id}  {task.title} ({task.priority.value}) "
        f"{format_duration(live_active_seconds(task, now))} / {format_duration(task.estimated_seconds)}"
        f"{due}{tags}"
    )


def _due_text(task: Task, now: datetime) -> str:
    if task.due_at is None:
        return "-"
    label = due_label(task, now)
    return f"{_local(task.due_at)} ({label})" if label else _local(task.due_at)


def parse_add_args(args: list[str]) -> TaskDraft:
    """
    /add <minutes> <title words...> [-p priority] [-t tag1,tag2] [-d description] [--due YYYY-MM-DD]

    Raises ValueError with a user-facing message on bad input.
    """
    if len(args) < 2:
        raise ValueError("Usage: /add <minutes> <title> [-p priority] [-t tags] [-d description] [--due date]")

    minutes_raw, rest = args[0], args[1:]
    title_words: list[str] = []
    priority = TaskPriority.MEDIUM
    tags: list[str] = []
    description = ""
    due_at: datetime | None = None

    i = 0
    while i < len(rest):
        tok = rest[i]
        if tok in ("-p", "--priority", "-t", "--tags", "-d", "--desc", "--due"):
            if i + 1 >= len(rest):
                raise ValueError(f"Missing value for {tok}.")
            val = rest[i + 1]
            if tok in ("-p", "--priority"):
                priority = TaskPriority.parse(val)
            elif tok in ("-t", "--tags"):
                tags.extend(val.split(","))
            elif tok in ("-d", "--desc"):
                description = val
            else:
                try:
                    due_at = datetime.fromisoformat(val).astimezone()
                except ValueError:
                    raise ValueError(f"Invalid due date: {val!r} (use YYYY-MM-DD).") from None
            i += 2
            continue
        title_words.append(tok)
        i += 1

    try:
        minutes = int(minutes_raw)
    except ValueError:
        raise ValueError("Estimated time must be a whole number of minutes.") from None

    return validate_draft(
        TaskDraft(
            title=" ".join(title_words),
            estimated_minutes=minutes,
            description=description,
            priority=priority,
            due_at=due_at,
            tags=tuple(tags),
        )
    )


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    try:
        draft = parse_add_args(args)
    except ValueError as e:
        return str(e)
    task = state.controller.create_task(draft)
    return f"Added task {task.id}: {task.title} ({task.estimated_minutes} min, {task.priority.value})."


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.store.list_tasks()
    if not tasks:
        return "No tasks yet. Add one with /add <minutes> <title>."

    task_filter = TaskFilter() if args and args[0].lower() == "all" else state.task_filter
    shown = filter_tasks(tasks, task_filter)
    if not shown:
        return "No tasks match your filters. Try adjusting your search criteria (/filter clear)."

    lines: list[str] = []
    if task_filter.is_filtering:
        lines.append(f"Filter: {task_filter.describe()}")
    for status, group in group_by_status(shown).items():
        if not group:
            continue
        lines.append(f"{status.value} ({len(group)}):")
        lines.extend(render_task_line(state, t) for t in group)
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    task = state.store.get(resolve_task_id(state, args[0]) or "") if args else None
    if task is None:
        return "Usage: /show <task id>"
    now = state.controller.clock.now()
    lines = [
        f"{task.title} [{task.id}]",
        f"  Status: {task.status.value}   Priority: {task.priority.value}",
        f"  Estimated: {format_duration(task.estimated_seconds)}   Active: {format_duration(live_active_seconds(task, now))}",
        f"  Started: {_local(task.started_at)}   Completed: {_local(task.completed_at)}   Due: {_due_text(task, now)}",
        f"  Breaks: {len(task.breaks)} (closed total {format_duration(task.closed_break_seconds)})",
    ]
    if task.description:
        lines.append(f"  {task.description}")
    if task.tags:
        lines.append(f"  Tags: {', '.join(task.tags)}")
    return "\n".join(lines)


def cmd_start(state: AppState, args: list[str]) -> str:
    task_id = resolve_task_id(state, args[0] if args else None)
    if task_id is None:
        return "Usage: /start <task id>"
    counters = state.controller.start_task(task_id)
    task = state.store.get(task_id)
    if counters is None or task is None:
        return "Nothing to start."
    label, value = format_remaining(counters.remaining)
    return f"Started {task.title}. Elapsed {format_duration(counters.elapsed)}, {label} {value}."


def cmd_pause(state: AppState, args: list[str]) -> str:
    task_id = resolve_task_id(state, args[0] if args else state.controller.active_task_id)
    if task_id is None or not state.controller.pause_task(task_id):
        return "Nothing to pause."
    task = state.store.get(task_id)
    return f"Paused {task.title if task else task_id}. Active time {format_duration(task.active_seconds if task else 0)}."


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = resolve_task_id(state, args[0] if args else state.controller.active_task_id)
    if task_id is None or not state.controller.complete_task(task_id):
        return "Nothing to complete."
    task = state.store.get(task_id)
    return f"Completed {task.title if task else task_id}. Active time {format_duration(task.active_seconds if task else 0)}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = resolve_task_id(state, args[0] if args else None)
    if task_id is None:
        return "Usage: /delete <task id>"
    if not state.controller.delete_task(task_id):
        return "Nothing to delete."
    return f"Deleted task {task_id}."


def cmd_timer(state: AppState, args: list[str]) -> str:
    task = state.controller.active_task
    counters = state.controller.counters
    if task is None or counters is None:
        return "No active task."
    label, value = format_remaining(counters.remaining)
    pct = progress_percent(counters.elapsed, task.estimated_seconds)
    alerts = "On" if state.sound_enabled else "Off"
    return (
        f"{window_title(state)}\n"
        f"  Elapsed {format_duration(counters.elapsed)} | {label} {value} | "
        f"Estimated {format_duration(task.estimated_seconds)} | {pct:.0f}% | Alerts {alerts}"
    )


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.stats
    return (
        "Task Statistics:\n"
        f"  Total Tasks: {s.total_tasks}\n"
        f"  Completion Rate: {s.completion_rate}% ({s.completed_tasks} done)\n"
        f"  Time Planned: {format_duration(s.total_estimated_minutes * 60)}\n"
        f"  Time Spent: {format_duration(s.total_active_seconds)}\n"
        f"  Break Time: {format_duration(s.total_break_seconds)}"
    )


def cmd_sound(state: AppState, args: list[str]) -> str:
    """
    /sound       -> show status
    /sound on    -> enable alerts
    /sound off   -> disable alerts
    """
    if not args:
        return f"Alerts are currently {'ON' if state.sound_enabled else 'OFF'}. Use /sound on or /sound off."

    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        state.trigger.enabled = True
        return "Alerts enabled."
    if arg in ("off", "0", "false", "no"):
        state.trigger.enabled = False
        return "Alerts disabled."
    return "Usage: /sound on or /sound off."


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter                         -> show current filter
    /filter clear                   -> reset
    /filter status=paused priority=high search=report
    """
    if not args:
        return f"Filter: {state.task_filter.describe()}"
    if args[0].lower() == "clear":
        state.task_filter = state.task_filter.clear()
        return "Filters cleared."

    status = state.task_filter.status
    priority = state.task_filter.priority
    search = state.task_filter.search
    try:
        for arg in args:
            key, sep, value = arg.partition("=")
            if not sep:
                raise ValueError(f"Expected key=value, got {arg!r}.")
            key = key.lower()
            all_value = value.strip().lower() in ("", "all")
            if key == "status":
                status = None if all_value else TaskStatus.parse(value)
            elif key == "priority":
                priority = None if all_value else TaskPriority.parse(value)
            elif key == "search":
                search = value
            else:
                raise ValueError(f"Unknown filter key: {key}.")
    except ValueError as e:
        return str(e)

    state.task_filter = TaskFilter(status=status, priority=priority, search=search)
    return f"Filter: {state.task_filter.describe()}"


def cmd_note(state: AppState, args: list[str]) -> str:
    """
    /note               -> list notes
    /note add <text>
    /note edit <id> <text>
    /note rm <id>
    """
    sub = args[0].lower() if args else "list"

    if sub == "list":
        notes = state.notes.list_notes()
        if not notes:
            return "No notes yet. Add one with /note add <text>."
        return "\n".join(f"{n.id} ({n.color}, {_local(n.created_at)}): {n.content}" for n in notes)

    if sub == "add":
        note = state.notes.add(" ".join(args[1:]))
        return f"Note {note.id} added." if note else "Note text is empty."

    if sub == "edit" and len(args) >= 3:
        ok = state.notes.edit(args[1], " ".join(args[2:]))
        return "Note updated." if ok else "No such note (or empty text)."

    if sub in ("rm", "delete") and len(args) >= 2:
        return "Note deleted." if state.notes.delete(args[1]) else "No such note."

    return "Usage: /note [list] | /note add <text> | /note edit <id> <text> | /note rm <id>"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Create a task: /add <minutes> <title> [-p priority] [-t tags] [-d desc] [--due date].")
registry.register("list", cmd_list, help_text="List tasks by status (/list all ignores the filter).", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("start", cmd_start, help_text="Start or resume a task: /start <id>.", aliases=["resume"])
registry.register("pause", cmd_pause, help_text="Pause a task (default: the active one).")
registry.register("done", cmd_done, help_text="Complete a task (default: the active one).", aliases=["complete"])
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("timer", cmd_timer, help_text="Show the live countdown of the active task.", aliases=["t"])
registry.register("stats", cmd_stats, help_text="Show task statistics.")
registry.register("sound", cmd_sound, help_text="Enable/disable alerts: /sound on | /sound off.")
registry.register("filter", cmd_filter, help_text="Filter the list: /filter status=.. priority=.. search=.. | /filter clear.")
registry.register("note", cmd_note, help_text="Scratch-pad notes: /note add|edit|rm|list.")
