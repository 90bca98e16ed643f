# src/taskflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one asyncio loop:
- the countdown tick driver,
- the console REPL (optional),
- Matrix alert delivery (optional).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..connectors.notifiers import FanoutNotifier, MatrixNotifier
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _attach_matrix(state: AppState) -> MatrixNotifier | None:
    from ..connectors.matrix_client import create_matrix_client

    settings = state.settings
    room_id = (getattr(settings, "matrix_room_id", "") or "").strip()
    if not room_id:
        logger.error("Matrix alerts enabled but TASKFLOW_MATRIX_ROOM_ID is not set.")
        return None

    client = await create_matrix_client(settings)
    if client is None:
        logger.error("Matrix client creation failed; alerts stay local.")
        return None

    notifier = MatrixNotifier(client, room_id)
    sink = state.trigger.sink
    if isinstance(sink, FanoutNotifier):
        sink.add(notifier)
    else:
        state.trigger.sink = FanoutNotifier([s for s in (sink, notifier) if s is not None])
    logger.info("Matrix alerts enabled (room=%s).", room_id)
    return notifier


async def run_app(state: AppState) -> None:
    settings = state.settings
    state.controller.restore_active()

    matrix: MatrixNotifier | None = None
    if getattr(settings, "matrix_enabled", False):
        matrix = await _attach_matrix(state)

    stop_main = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not supported on every platform (e.g. Windows event loops).
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop_main.set)

    try:
        if getattr(settings, "console_enabled", True):
            console = asyncio.create_task(run_console_loop(state))
            stopper = asyncio.create_task(stop_main.wait())
            await asyncio.wait({console, stopper}, return_when=asyncio.FIRST_COMPLETED)
            for pending in (console, stopper):
                pending.cancel()
        else:
            logger.info("Console disabled. Countdown and alerts only. Press Ctrl+C to stop.")
            await stop_main.wait()
    finally:
        shutdown_state(state)
        if matrix is not None:
            with contextlib.suppress(Exception):
                await matrix.aclose()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("nio").setLevel(max(console_level, logging.WARNING))
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)
    state = create_initial_state(settings=settings)

    try:
        asyncio.run(run_app(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
