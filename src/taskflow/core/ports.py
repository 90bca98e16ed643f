# src/taskflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The lifecycle core depends on Protocols instead of concrete implementations.
This keeps the clock, persistence and notification delivery swappable and
makes deterministic testing possible.
"""

from datetime import datetime
from typing import Any, Protocol


class Clock(Protocol):
    """The single source of wall-clock time for lifecycle transitions."""

    def now(self) -> datetime: ...


class NotificationSink(Protocol):
    """
    Delivery-side port: platform specific alerting (sound, OS popup, chat room).

    Permission handling and delivery failures belong to the implementation.
    """

    def deliver(self, title: str, body: str, icon: str) -> None: ...


class CollectionRepo(Protocol):
    """Reads/writes whole serialized collections under a namespaced key."""

    def load_collection(self, name: str) -> list[dict[str, Any]]: ...
    def save_collection(self, name: str, records: list[dict[str, Any]]) -> None: ...
