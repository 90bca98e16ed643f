# src/taskflow/tasks/task_timer.py

from __future__ import annotations

"""
Timer tick driver.

A small periodic loop that, while a task is active:
- adds exactly one second to the live elapsed counter,
- removes exactly one second from the live remaining counter,
- hands the counters to tick listeners (display, notification trigger).

The counters are seeded from the stored task when it becomes active and are
never recomputed from wall-clock deltas, so a late or skipped tick only
drifts the display. Stored active time is never written from here.

To stop the driver, call stop(); this cancels the scheduled loop synchronously.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiveCounters:
    task_id: str
    elapsed: int
    remaining: int

    @property
    def overtime(self) -> bool:
        return self.remaining <= 0


TickListener = Callable[[LiveCounters], None]


class TickDriver:
    """Owns the cancellable handle of the 1 Hz countdown for the active task."""

    def __init__(self, *, interval_seconds: float = 1.0) -> None:
        self._interval = max(0.01, float(interval_seconds))
        self._counters: LiveCounters | None = None
        self._handle: asyncio.Task[None] | None = None
        self._listeners: list[TickListener] = []

    @property
    def counters(self) -> LiveCounters | None:
        return self._counters

    @property
    def is_running(self) -> bool:
        return self._handle is not None and not self._handle.done()

    def add_listener(self, listener: TickListener) -> None:
        self._listeners.append(listener)

    def start(self, task_id: str, *, elapsed: int, remaining: int) -> LiveCounters:
        """(Re)seed the counters for task_id and schedule ticks."""
        self.stop()
        counters = LiveCounters(task_id=task_id, elapsed=int(elapsed), remaining=int(remaining))
        self._counters = counters

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; countdown for task %s will not advance.", task_id)
            return counters

        self._handle = loop.create_task(self._run(counters), name=f"taskflow-tick-{task_id}")
        logger.debug(
            "Tick driver started task=%s elapsed=%s remaining=%s",
            task_id,
            counters.elapsed,
            counters.remaining,
        )
        return counters

    def stop(self) -> None:
        handle = self._handle
        self._handle = None
        if self._counters is not None:
            logger.debug("Tick driver stopped task=%s", self._counters.task_id)
        self._counters = None
        if handle is not None and not handle.done():
            handle.cancel()

    def tick(self) -> LiveCounters | None:
        """Advance the live counters by one second and notify listeners."""
        counters = self._counters
        if counters is None:
            return None

        counters.elapsed += 1
        counters.remaining -= 1
        logger.debug("tick task=%s elapsed=%s remaining=%s", counters.task_id, counters.elapsed, counters.remaining)

        for listener in list(self._listeners):
            try:
                listener(counters)
            except Exception:
                logger.exception("Tick listener failed task=%s", counters.task_id)
        return counters

    async def _run(self, counters: LiveCounters) -> None:
        while True:
            await asyncio.sleep(self._interval)
            # Reseeded or stopped while we were sleeping.
            if self._counters is not counters:
                return
            self.tick()
