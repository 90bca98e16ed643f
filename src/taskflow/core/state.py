# src/taskflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..notes.note_store import NoteBook
from ..tasks.task_filters import TaskFilter
from ..tasks.task_lifecycle import LifecycleController
from ..tasks.task_notifications import NotificationTrigger
from ..tasks.task_stats import TaskStats
from ..tasks.task_store import TaskStore
from .ports import CollectionRepo


@dataclass
class AppState:
    """
    Everything owned by the single logical actor (the event loop).

    Connectors read from here and mutate tasks only through `controller`.
    """

    settings: Any

    store: TaskStore
    controller: LifecycleController
    trigger: NotificationTrigger
    notes: NoteBook
    repo: CollectionRepo | None = None

    stats: TaskStats = field(default_factory=TaskStats)
    task_filter: TaskFilter = field(default_factory=TaskFilter)

    @property
    def sound_enabled(self) -> bool:
        return self.trigger.enabled
