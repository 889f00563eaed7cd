# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskpad.config import Settings


def test_defaults_without_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "TASKPAD_DATA_DIR",
        "TASKPAD_TASKS_DB_PATH",
        "TASKPAD_DEFAULT_SORT",
        "TASKPAD_REMINDERS_ALLOWED",
        "TASKPAD_REMINDER_POLL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.data_dir == Path(".local/taskpad")
    assert s.tasks_db_path == Path(".local/taskpad") / "taskpad.sqlite3"
    assert s.default_sort == "by_created_date"
    assert s.reminders_allowed is True
    assert s.reminder_poll_seconds == 15.0


def test_env_overrides_and_bad_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKPAD_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TASKPAD_TASKS_DB_PATH", raising=False)
    monkeypatch.setenv("TASKPAD_DEFAULT_SORT", "BY_PRIORITY")
    monkeypatch.setenv("TASKPAD_REMINDERS_ALLOWED", "no")
    monkeypatch.setenv("TASKPAD_REMINDER_POLL_SECONDS", "0.1")

    s = Settings.from_env()
    assert s.tasks_db_path == tmp_path / "taskpad.sqlite3"
    assert s.default_sort == "by_priority"
    assert s.reminders_allowed is False
    assert s.reminder_poll_seconds == 0.5

    monkeypatch.setenv("TASKPAD_DEFAULT_SORT", "alphabetical")
    monkeypatch.setenv("TASKPAD_REMINDER_POLL_SECONDS", "often")
    s2 = Settings.from_env()
    assert s2.default_sort == "by_created_date"
    assert s2.reminder_poll_seconds == 15.0
