# src/taskflow/notes/note_store.py

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..core.ports import Clock, CollectionRepo
from ..storage.codec import dt_to_str, str_to_dt
from ..storage.persistence import NOTES_COLLECTION

logger = logging.getLogger(__name__)

NOTE_COLORS = ("yellow", "pink", "blue", "green", "purple")


@dataclass(slots=True)
class Note:
    id: str
    content: str
    color: str
    created_at: datetime


class NoteBook:
    """
    Scratch-pad notes, unrelated to tasks. Newest first.

    Every mutation is written back to the repo under its own collection key.
    """

    def __init__(
        self,
        repo: CollectionRepo | None,
        *,
        clock: Clock,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex[:8],
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._rng = rng or random.Random()
        self._id_factory = id_factory
        self._notes: list[Note] = []

    def load(self) -> int:
        if self._repo is None:
            return 0
        notes: list[Note] = []
        for rec in self._repo.load_collection(NOTES_COLLECTION):
            try:
                created = str_to_dt(rec.get("createdAt")) or self._clock.now()
                notes.append(
                    Note(
                        id=str(rec["id"]),
                        content=str(rec.get("content") or ""),
                        color=str(rec.get("color") or NOTE_COLORS[0]),
                        created_at=created,
                    )
                )
            except (KeyError, ValueError):
                logger.warning("Skipping malformed note record %r", rec.get("id"))
        self._notes = notes
        return len(notes)

    def _save(self) -> None:
        if self._repo is None:
            return
        records: list[dict[str, Any]] = [
            {"id": n.id, "content": n.content, "color": n.color, "createdAt": dt_to_str(n.created_at)}
            for n in self._notes
        ]
        try:
            self._repo.save_collection(NOTES_COLLECTION, records)
        except Exception:
            logger.exception("Failed to persist notes.")

    def list_notes(self) -> list[Note]:
        return list(self._notes)

    def add(self, content: str) -> Note | None:
        text = (content or "").strip()
        if not text:
            return None
        note = Note(
            id=self._id_factory(),
            content=text,
            color=self._rng.choice(NOTE_COLORS),
            created_at=self._clock.now(),
        )
        self._notes.insert(0, note)
        self._save()
        return note

    def edit(self, note_id: str, content: str) -> bool:
        text = (content or "").strip()
        if not text:
            return False
        for note in self._notes:
            if note.id == note_id:
                note.content = text
                self._save()
                return True
        return False

    def delete(self, note_id: str) -> bool:
        before = len(self._notes)
        self._notes = [n for n in self._notes if n.id != note_id]
        if len(self._notes) == before:
            return False
        self._save()
        return True
