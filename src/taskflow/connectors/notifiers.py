# src/taskflow/connectors/notifiers.py

"""
Notification delivery collaborators.

The trigger decides *that* an alert happens; these decide *how* it reaches
the user. Delivery failures are logged here and never reach the core.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable, Iterable
from datetime import datetime

from ..core.ports import NotificationSink

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Terminal bell (the audio part) plus a printed alert line."""

    def __init__(self, emit: Callable[[str], None] | None = None, *, bell: bool = True) -> None:
        self._emit = emit or (lambda text: print(text, flush=True))
        self._bell = bell

    def deliver(self, title: str, body: str, icon: str) -> None:
        if self._bell and sys.stdout.isatty():
            sys.stdout.write("\a")
            sys.stdout.flush()
        self._emit(f"[{_ts_local()}] [ALERT] {title}: {body}")


class MatrixNotifier:
    """
    Posts alerts into one Matrix room.

    deliver() is called from synchronous lifecycle code running on the event
    loop, so the send is scheduled as a background task.
    """

    def __init__(self, client, room_id: str) -> None:
        self._client = client
        self._room_id = room_id
        self._pending: set[asyncio.Task[None]] = set()

    def deliver(self, title: str, body: str, icon: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; Matrix alert %r dropped.", title)
            return
        task = loop.create_task(self._send(f"{title}\n{body}"))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, text: str) -> None:
        try:
            await self._client.room_send(
                room_id=self._room_id,
                message_type="m.room.message",
                content={"msgtype": "m.notice", "body": text},
            )
            logger.info("Alert sent to Matrix room %s", self._room_id)
        except Exception:
            logger.exception("Failed to send alert to Matrix room %s", self._room_id)

    async def aclose(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self._client.close()


class FanoutNotifier:
    """Delivers each alert to every configured sink; one failing sink does not stop the rest."""

    def __init__(self, sinks: Iterable[NotificationSink]) -> None:
        self.sinks: list[NotificationSink] = list(sinks)

    def add(self, sink: NotificationSink) -> None:
        self.sinks.append(sink)

    def deliver(self, title: str, body: str, icon: str) -> None:
        for sink in list(self.sinks):
            try:
                sink.deliver(title, body, icon)
            except Exception:
                logger.exception("Notification sink %r failed", sink)
