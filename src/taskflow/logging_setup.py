# src/taskflow/logging_setup.py

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

TICK_LOGGER = "taskflow.tasks.task_timer"


def _is_tick_chatter(record: logging.LogRecord) -> bool:
    return record.name == TICK_LOGGER and record.levelno < logging.WARNING


class _ConsoleNoiseFilter(logging.Filter):
    """
    Make the interactive console usable:
    - allow taskflow logs, except per-second tick chatter
    - suppress nio/aiohttp unless WARNING+
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name.startswith("taskflow."):
            return not _is_tick_chatter(record)

        if name == "py.warnings":
            return record.levelno >= logging.ERROR

        if name.startswith(("nio", "aiohttp")):
            return record.levelno >= logging.WARNING

        return record.levelno >= logging.ERROR


class _TickChatterFilter(logging.Filter):
    """Route tick chatter: only_ticks=True keeps just it, False drops it."""

    def __init__(self, *, only_ticks: bool) -> None:
        super().__init__()
        self._only_ticks = only_ticks

    def filter(self, record: logging.LogRecord) -> bool:
        return _is_tick_chatter(record) == self._only_ticks


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskflow",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    tick_log_max_bytes: int = 1_000_000,
) -> None:
    """
    Configure logging with three handlers:
    - console: filtered for interactive use
    - taskflow.log: everything except per-second tick chatter
    - timer.log: tick chatter only, size-capped and rotated

    Call this ONCE, very early (before first logger.info).
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_dir / "taskflow.log"), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    fh.addFilter(_TickChatterFilter(only_ticks=False))
    root.addHandler(fh)

    th = logging.handlers.RotatingFileHandler(
        str(log_dir / "timer.log"),
        maxBytes=max(1024, int(tick_log_max_bytes)),
        backupCount=1,
        encoding="utf-8",
    )
    th.setLevel(logging.DEBUG)
    th.setFormatter(fmt)
    th.addFilter(_TickChatterFilter(only_ticks=True))
    root.addHandler(th)

    logging.captureWarnings(True)
