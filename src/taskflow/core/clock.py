# src/taskflow/core/clock.py

from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    """Timezone-aware UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
