# src/taskpad/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (persistence/reminders/store).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_api import restore_reminders
from ..tasks.task_models import SortOption
from ..tasks.task_persistence import SQLiteKeyValueStore, TaskPersistence
from ..tasks.task_reminders import LocalReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    allowed = bool(getattr(settings, "reminders_allowed", True))
    reminders = LocalReminderScheduler(authorizer=lambda: allowed)

    persistence = TaskPersistence(SQLiteKeyValueStore(settings.tasks_db_path))
    store = TaskStore(
        persistence,
        reminders,
        sort_option=SortOption(getattr(settings, "default_sort", SortOption.BY_CREATED_DATE)),
    )

    restore_reminders(store, reminders)

    logger.info("Task store ready: %d tasks", len(store.tasks))
    return AppState(settings=settings, store=store, reminders=reminders)
