# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from taskflow.config import Settings


def test_settings_defaults(monkeypatch) -> None:
    for name in ("TASKFLOW_DATA_DIR", "TASKFLOW_DB_PATH", "TASKFLOW_SOUND_ENABLED", "TASKFLOW_TICK_INTERVAL_SECONDS"):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.data_dir == Path(".local/taskflow")
    assert s.db_path == Path(".local/taskflow") / "taskflow.sqlite3"
    assert s.sound_enabled is True
    assert s.tick_interval_seconds == 1.0


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("TASKFLOW_DB_PATH", raising=False)
    monkeypatch.setenv("TASKFLOW_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKFLOW_SOUND_ENABLED", "off")
    monkeypatch.setenv("TASKFLOW_TICK_INTERVAL_SECONDS", "not-a-number")
    monkeypatch.setenv("TASKFLOW_STORAGE_NAMESPACE", "work")

    s = Settings.from_env()
    assert s.db_path == tmp_path / "taskflow.sqlite3"
    assert s.sound_enabled is False
    assert s.tick_interval_seconds == 1.0
    assert s.storage_namespace == "work"
