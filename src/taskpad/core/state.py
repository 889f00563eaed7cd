# src/taskpad/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_reminders import LocalReminderScheduler
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings live on the state so command handlers don't read global config.
    settings: Any

    store: TaskStore
    reminders: LocalReminderScheduler

    # Serializes store mutations coming from different front-end threads.
    lock: threading.RLock = field(default_factory=threading.RLock)
