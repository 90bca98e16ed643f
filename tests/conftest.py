# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskflow.cli.bootstrap import create_initial_state
from taskflow.core.state import AppState
from taskflow.storage.persistence import SQLiteCollectionRepo
from taskflow.tasks.task_lifecycle import LifecycleController
from taskflow.tasks.task_notifications import NotificationTrigger
from taskflow.tasks.task_store import TaskStore
from taskflow.tasks.task_timer import TickDriver

from .fakes import FakeClock, RecordingSink


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment.
    """
    return SimpleNamespace(
        app_name="taskflow",
        data_dir=tmp_path,
        db_path=tmp_path / "taskflow.sqlite3",
        storage_namespace="test",
        tick_interval_seconds=1.0,
        sound_enabled=True,
        notification_icon="/logo.svg",
        console_enabled=False,
        matrix_enabled=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore()


@pytest.fixture()
def controller(store: TaskStore, clock: FakeClock, sink: RecordingSink) -> LifecycleController:
    """
    Controller without a running event loop: the tick driver only seeds the
    counters and tests advance them explicitly with ticker.tick().
    """
    return LifecycleController(
        store,
        clock=clock,
        ticker=TickDriver(interval_seconds=1.0),
        trigger=NotificationTrigger(sink, enabled=True),
        id_factory=_sequential_ids(),
    )


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock, sink: RecordingSink) -> AppState:
    """AppState wired with a real SQLite repo (tmp dir) and deterministic fakes."""
    return create_initial_state(
        settings=settings,
        clock=clock,
        repo=SQLiteCollectionRepo(settings.db_path, namespace=settings.storage_namespace),
        sink=sink,
    )


def _sequential_ids():
    counter = iter(range(1, 10_000))
    return lambda: f"t{next(counter)}"
