# tests/conftest.py

from __future__ import annotations

import itertools
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskpad.core.state import AppState
from taskpad.tasks.task_reminders import LocalReminderScheduler
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeClock, FakePersistence, FakeReminders


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskpad-test",
        log_level="DEBUG",
        console_enabled=False,
        default_sort="by_created_date",
        reminders_enabled=True,
        reminders_allowed=True,
        reminder_poll_seconds=0.01,
        data_dir=tmp_path / "data",
        tasks_db_path=tmp_path / "data" / "taskpad.sqlite3",
    )


@pytest.fixture()
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture()
def reminders() -> FakeReminders:
    return FakeReminders()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(persistence: FakePersistence, reminders: FakeReminders, clock: FakeClock) -> TaskStore:
    """TaskStore wired with in-memory fakes and deterministic ids/timestamps."""
    counter = itertools.count(1)
    return TaskStore(
        persistence,
        reminders,
        clock=clock,
        id_factory=lambda: f"task-{next(counter)}",
    )


@pytest.fixture()
def state(settings: SimpleNamespace, persistence: FakePersistence) -> AppState:
    """
    AppState for command tests.

    Persistence is faked; the reminder table is the real in-process one,
    since /reminders and /status read it back.
    """
    reminders = LocalReminderScheduler()
    store = TaskStore(persistence, reminders, clock=FakeClock())
    return AppState(settings=settings, store=store, reminders=reminders)
