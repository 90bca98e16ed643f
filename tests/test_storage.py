# tests/test_storage.py

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from taskflow.cli.bootstrap import create_initial_state, shutdown_state
from taskflow.storage.codec import decode_tasks, record_to_task, str_to_dt, task_to_record
from taskflow.storage.persistence import TASKS_COLLECTION, SQLiteCollectionRepo
from taskflow.tasks.task_lifecycle import LifecycleController
from taskflow.tasks.task_models import ClosedBreak, OpenBreak, TaskDraft, TaskStatus
from taskflow.tasks.task_store import TaskStore
from taskflow.tasks.task_timer import TickDriver

from .fakes import FakeClock, RecordingSink


def test_tasks_round_trip_through_sqlite(state, settings, clock: FakeClock) -> None:
    c = state.controller
    task = c.create_task(TaskDraft(title="Persist me", estimated_minutes=15, tags=("a", "b")))
    c.start_task(task.id)
    clock.advance(30)
    c.pause_task(task.id)
    clock.advance(60)
    c.start_task(task.id)
    clock.advance(5)
    c.pause_task(task.id)

    reloaded = create_initial_state(
        settings=settings,
        clock=clock,
        repo=SQLiteCollectionRepo(settings.db_path, namespace=settings.storage_namespace),
        sink=RecordingSink(),
    )
    copy = reloaded.store.get(task.id)

    assert copy is not None
    assert copy.status == TaskStatus.PAUSED
    assert copy.active_seconds == 35
    assert isinstance(copy.started_at, datetime)
    assert copy.started_at == task.started_at
    assert isinstance(copy.breaks[0], ClosedBreak)
    assert copy.breaks[0].duration_seconds == 60
    assert isinstance(copy.breaks[1], OpenBreak)
    assert copy.last_paused_at == task.last_paused_at
    assert copy.tags == ("a", "b")
    assert reloaded.stats.total_active_seconds == 35


def test_running_task_is_readopted_after_crash(state, settings, clock: FakeClock) -> None:
    task = state.controller.create_task(TaskDraft(title="Crash", estimated_minutes=5))
    state.controller.start_task(task.id)
    clock.advance(90)

    # No shutdown: the record still says "In Progress".
    reloaded = create_initial_state(
        settings=settings,
        clock=clock,
        repo=SQLiteCollectionRepo(settings.db_path, namespace=settings.storage_namespace),
        sink=RecordingSink(),
    )
    assert reloaded.controller.restore_active() == task.id
    assert reloaded.controller.counters.elapsed == 90

    clock.advance(10)
    reloaded.controller.pause_task(task.id)
    assert reloaded.store.get(task.id).active_seconds == 100


def test_shutdown_folds_the_running_span(state, clock: FakeClock) -> None:
    task = state.controller.create_task(TaskDraft(title="Bye", estimated_minutes=5))
    state.controller.start_task(task.id)
    clock.advance(42)

    shutdown_state(state)

    records = state.repo.load_collection(TASKS_COLLECTION)
    assert records[0]["status"] == "Paused"
    assert records[0]["activeTime"] == 42


def test_namespaces_are_isolated(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    one = SQLiteCollectionRepo(db, namespace="one")
    two = SQLiteCollectionRepo(db, namespace="two")

    one.save_collection("tasks", [{"id": "x"}])
    assert two.load_collection("tasks") == []
    assert one.load_collection("tasks") == [{"id": "x"}]


def test_codec_reads_js_style_timestamps() -> None:
    task = record_to_task(
        {
            "id": "1700000000000",
            "title": "Legacy",
            "description": "",
            "estimatedTime": 30,
            "status": "Paused",
            "priority": "Urgent",
            "startTime": "2026-01-05T09:00:00.000Z",
            "activeTime": 120,
            "breakDurations": [{"startTime": "2026-01-05T09:02:00.000Z", "endTime": None}],
            "lastPausedAt": "2026-01-05T09:02:00.000Z",
            "tags": ["x", "x", " "],
        }
    )
    assert task.started_at == datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    assert isinstance(task.breaks[0], OpenBreak)
    assert task.tags == ("x",)
    assert record_to_task(task_to_record(task)) == task


def test_naive_timestamps_are_read_as_utc() -> None:
    assert str_to_dt("2026-01-05T09:00:00") == datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
    assert str_to_dt(None) is None


def test_malformed_records_are_skipped() -> None:
    good = {"id": "ok", "title": "Fine", "estimatedTime": 5}
    bad_break_order = {
        "id": "bad",
        "title": "Broken",
        "estimatedTime": 5,
        "breakDurations": [
            {"startTime": "2026-01-05T09:00:00Z"},
            {"startTime": "2026-01-05T09:10:00Z", "endTime": "2026-01-05T09:11:00Z"},
        ],
    }
    tasks = decode_tasks([good, bad_break_order, {"title": "no id"}, {"id": "s", "status": "Sleeping"}])
    assert [t.id for t in tasks] == ["ok"]


def test_legacy_in_progress_record_without_running_since(clock: FakeClock) -> None:
    # Written by the browser app: no runningSince, one finished break.
    rec = {
        "id": "legacy",
        "title": "Old tab",
        "estimatedTime": 10,
        "status": "In Progress",
        "startTime": "2026-01-05T09:00:00.000Z",
        "activeTime": 30,
        "breakDurations": [{"startTime": "2026-01-05T09:00:30.000Z", "endTime": "2026-01-05T09:01:30.000Z"}],
    }
    store = TaskStore(decode_tasks([rec]))
    controller = LifecycleController(store, clock=clock, ticker=TickDriver())

    clock.advance(120)
    assert controller.restore_active() == "legacy"
    clock.advance(30)
    controller.complete_task("legacy")

    assert store.get("legacy").active_seconds == 90


def _rec(status: str, breaks: list[dict], **extra) -> dict:
    rec = {
        "id": "r",
        "title": "Mixed up",
        "estimatedTime": 5,
        "status": status,
        "startTime": "2026-01-05T09:00:00Z",
        "breakDurations": breaks,
    }
    rec.update(extra)
    return rec


def test_completed_record_with_open_break_gets_it_closed() -> None:
    task = record_to_task(
        _rec("Completed", [{"startTime": "2026-01-05T09:05:00Z"}], completionTime="2026-01-05T09:07:00Z")
    )
    assert task.status == TaskStatus.COMPLETED
    assert task.open_break is None
    assert task.breaks[0].duration_seconds == 120


def test_in_progress_record_with_open_break_is_read_as_paused() -> None:
    task = record_to_task(
        _rec("In Progress", [{"startTime": "2026-01-05T09:05:00Z"}], runningSince="2026-01-05T09:00:00Z")
    )
    assert task.status == TaskStatus.PAUSED
    assert task.running_since is None
    assert task.last_paused_at == datetime(2026, 1, 5, 9, 5, tzinfo=timezone.utc)


def test_paused_record_without_open_break_gets_one() -> None:
    task = record_to_task(_rec("Paused", [], lastPausedAt="2026-01-05T09:04:00Z"))
    assert task.last_paused_at == datetime(2026, 1, 5, 9, 4, tzinfo=timezone.utc)

    fallback = record_to_task(
        _rec("Paused", [{"startTime": "2026-01-05T09:01:00Z", "endTime": "2026-01-05T09:02:00Z"}])
    )
    assert fallback.last_paused_at == datetime(2026, 1, 5, 9, 2, tzinfo=timezone.utc)

    bare = record_to_task({"id": "n", "title": "Nothing", "estimatedTime": 5, "status": "Paused"})
    assert bare.status == TaskStatus.NOT_STARTED
    assert bare.breaks == []
