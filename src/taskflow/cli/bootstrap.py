# src/taskflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- loads persisted tasks/notes and wires store, controller, ticker and alerts
  into AppState,
- keeps stats and persistence in step with every store mutation.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..connectors.notifiers import ConsoleNotifier, FanoutNotifier
from ..core.clock import SystemClock
from ..core.ports import Clock, CollectionRepo, NotificationSink
from ..core.state import AppState
from ..notes.note_store import NoteBook
from ..storage.codec import decode_tasks, encode_tasks
from ..storage.persistence import TASKS_COLLECTION, SQLiteCollectionRepo
from ..tasks.task_lifecycle import LifecycleController
from ..tasks.task_notifications import NotificationTrigger
from ..tasks.task_stats import compute_stats
from ..tasks.task_store import TaskStore
from ..tasks.task_timer import TickDriver

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def persist_tasks(state: AppState) -> None:
    if state.repo is None:
        return
    try:
        state.repo.save_collection(TASKS_COLLECTION, encode_tasks(state.store))
    except Exception:
        # The in-memory store stays authoritative; the next mutation retries.
        logger.exception("Failed to persist tasks.")


def create_initial_state(
    *,
    settings=None,
    clock: Clock | None = None,
    repo: CollectionRepo | None = None,
    sink: NotificationSink | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings, clock, repo and sink injectable makes the app easy to
    test. If settings is None, falls back to get_settings(); if repo is None,
    a SQLite repo at settings.db_path is used.
    """
    if settings is None:
        settings = get_settings()
    clock = clock or SystemClock()

    if repo is None:
        _ensure_local_dirs(settings)
        repo = SQLiteCollectionRepo(
            settings.db_path,
            namespace=getattr(settings, "storage_namespace", "taskflow"),
        )

    tasks = decode_tasks(repo.load_collection(TASKS_COLLECTION))
    store = TaskStore(tasks)

    trigger = NotificationTrigger(
        sink if sink is not None else FanoutNotifier([ConsoleNotifier()]),
        enabled=getattr(settings, "sound_enabled", True),
        icon=getattr(settings, "notification_icon", "/logo.svg"),
    )
    controller = LifecycleController(
        store,
        clock=clock,
        ticker=TickDriver(interval_seconds=getattr(settings, "tick_interval_seconds", 1.0)),
        trigger=trigger,
    )

    notes = NoteBook(repo, clock=clock)
    notes.load()

    state = AppState(
        settings=settings,
        store=store,
        controller=controller,
        trigger=trigger,
        notes=notes,
        repo=repo,
        stats=compute_stats(store),
    )

    def _on_store_change(changed: TaskStore) -> None:
        state.stats = compute_stats(changed)
        persist_tasks(state)

    store.subscribe(_on_store_change)

    logger.info("Loaded %d tasks and %d notes.", len(store), len(notes.list_notes()))
    return state


def shutdown_state(state: AppState) -> None:
    """Fold the running span of the active task (if any) and stop the countdown."""
    try:
        state.controller.pause_active()
    except Exception:
        logger.exception("Failed to pause the active task on shutdown.")
    state.controller.ticker.stop()
    persist_tasks(state)
