# tests/test_commands.py

from __future__ import annotations

import pytest

from taskflow.cli.commands import CommandRegistry, parse_add_args, registry, window_title
from taskflow.tasks.task_models import TaskPriority, TaskStatus


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called: list[list[str]] = []

    def handler(state, args):
        called.append(args)
        return "ok"

    reg.register("a", handler, "a", aliases=["x"])

    assert reg.handle(state, "/a one two") == "ok"
    assert reg.handle(state, '/x "quoted words"') == "ok"
    assert called == [["one", "two"], ["quoted words"]]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_parse_add_args() -> None:
    draft = parse_add_args(["25", "Write", "report", "-p", "high", "-t", "work, writing,work", "-d", "Q3 numbers"])
    assert draft.title == "Write report"
    assert draft.estimated_minutes == 25
    assert draft.priority == TaskPriority.HIGH
    assert draft.tags == ("work", "writing")
    assert draft.description == "Q3 numbers"


@pytest.mark.parametrize(
    "args, message",
    [
        (["0", "Nothing"], "greater than zero"),
        (["abc", "Title"], "whole number"),
        (["10", "-p", "low"], "title is required"),
        (["10", "Title", "-p", "someday"], "unknown priority"),
        (["10"], "Usage"),
    ],
)
def test_add_rejects_bad_input_before_the_controller(state, args, message) -> None:
    reply = registry.handle(state, "/add " + " ".join(args))
    assert message.lower() in reply.lower()
    assert len(state.store) == 0


def test_console_lifecycle_flow(state, clock) -> None:
    reply = registry.handle(state, '/add 1 "Fix bug" -t urgent')
    assert reply.startswith("Added task")
    task = state.store.list_tasks()[0]

    assert "Started Fix bug" in registry.handle(state, f"/start {task.id[:4]}")
    assert state.controller.active_task_id == task.id
    assert window_title(state) == "(00:00:00) Fix bug - taskflow"
    assert "Remaining 00:01:00" in registry.handle(state, "/timer")

    clock.advance(30)
    assert "Paused Fix bug" in registry.handle(state, "/pause")
    assert task.status == TaskStatus.PAUSED
    assert registry.handle(state, "/timer") == "No active task."

    assert "Nothing to pause" in registry.handle(state, "/pause")
    registry.handle(state, f"/start {task.id}")
    clock.advance(45)
    assert "Completed Fix bug" in registry.handle(state, "/done")
    assert task.active_seconds == 75
    assert "Nothing to complete" in registry.handle(state, f"/done {task.id}")

    stats = registry.handle(state, "/stats")
    assert "Completion Rate: 100%" in stats
    assert "Time Spent: 00:01:15" in stats
    assert "Break Time: 00:00:00" in stats

    assert "Deleted" in registry.handle(state, f"/delete {task.id}")
    assert len(state.store) == 0


def test_list_respects_filter(state) -> None:
    registry.handle(state, "/add 10 Alpha -p high")
    registry.handle(state, "/add 10 Beta -p low")

    listing = registry.handle(state, "/list")
    assert "Not Started (2):" in listing

    registry.handle(state, "/filter priority=high")
    listing = registry.handle(state, "/list")
    assert "Alpha" in listing and "Beta" not in listing
    assert "Beta" in registry.handle(state, "/list all")

    registry.handle(state, "/filter search=zzz")
    assert "No tasks match" in registry.handle(state, "/list")

    assert registry.handle(state, "/filter clear") == "Filters cleared."
    assert "Unknown filter key" in registry.handle(state, "/filter color=red")


def test_sound_toggle_gates_alerts(state, sink) -> None:
    assert registry.handle(state, "/sound off") == "Alerts disabled."
    registry.handle(state, "/add 1 Quiet")
    task = state.store.list_tasks()[0]
    registry.handle(state, f"/start {task.id}")
    registry.handle(state, "/done")
    assert sink.delivered == []

    assert registry.handle(state, "/sound on") == "Alerts enabled."
    assert "ON" in registry.handle(state, "/sound")


def test_note_commands(state) -> None:
    assert "No notes yet" in registry.handle(state, "/note")
    assert registry.handle(state, "/note add remember the milk").endswith("added.")
    note = state.notes.list_notes()[0]
    assert "remember the milk" in registry.handle(state, "/note list")
    assert registry.handle(state, f"/note edit {note.id} oat milk") == "Note updated."
    assert registry.handle(state, f"/note rm {note.id}") == "Note deleted."


def test_list_and_show_use_live_active_time_and_due_flags(state, clock) -> None:
    registry.handle(state, "/add 10 Late --due 2026-01-05T08:00:00+00:00")
    registry.handle(state, "/add 10 Soon --due 2026-01-05T09:30:00+00:00")
    late, soon = state.store.list_tasks()

    registry.handle(state, f"/start {late.id}")
    clock.advance(42)

    listing = registry.handle(state, "/list")
    assert "00:00:42 / 00:10:00" in listing
    assert "(overdue)" in listing
    assert "(due soon)" in listing

    shown = registry.handle(state, f"/show {late.id}")
    assert "Active: 00:00:42" in shown
    assert "(overdue)" in shown
