# src/taskpad/tasks/task_api.py

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.ports import ReminderPort
from .task_models import Task, TaskCategory, TaskPriority
from .task_presentation import REMINDER_TITLE, parse_category, parse_priority
from .task_store import TaskStore

logger = logging.getLogger(__name__)

_RELATIVE_RE = re.compile(r"^\+(\d+)([mhd])$")
_UNIT_SECONDS = {"m": 60, "h": 3600, "d": 86400}


def parse_due(raw: str, *, now_ts: float | None = None) -> float | None:
    """
    Parse a due time typed by the user.

    Accepted forms:
    - "+30m", "+2h", "+1d"      relative to now
    - "HH:MM"                   today, local time
    - "YYYY-MM-DDTHH:MM"        absolute, local time (a space also works as separator)

    Returns epoch seconds, or None if the text is not a due time.
    """
    s = (raw or "").strip()
    if not s:
        return None
    if now_ts is None:
        now_ts = time.time()

    m = _RELATIVE_RE.match(s)
    if m:
        return now_ts + int(m.group(1)) * _UNIT_SECONDS[m.group(2)]

    for fmt in ("%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M"):
        try:
            return datetime.strptime(s, fmt).timestamp()
        except ValueError:
            pass

    try:
        hm = datetime.strptime(s, "%H:%M")
    except ValueError:
        return None
    today = datetime.fromtimestamp(now_ts).replace(hour=0, minute=0, second=0, microsecond=0)
    return (today + timedelta(hours=hm.hour, minutes=hm.minute)).timestamp()


@dataclass(slots=True)
class TaskDraft:
    """What a one-line "/add" input asks for, before it reaches the store."""

    title: str
    category: TaskCategory = TaskCategory.PERSONAL
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: float | None = None
    notes: str | None = None
    reminder_enabled: bool = False


def parse_task_line(line: str, *, now_ts: float | None = None) -> TaskDraft:
    """
    Split "/add" arguments into a TaskDraft.

    Markers (anywhere before "--"):
      #category   !priority   @due   +remind
    Everything else is the title. Unrecognized markers stay in the title.
    Words after a standalone "--" become the notes.
    """
    draft = TaskDraft(title="")
    words: list[str] = []

    tokens = (line or "").split()
    if "--" in tokens:
        cut = tokens.index("--")
        draft.notes = " ".join(tokens[cut + 1 :]) or None
        tokens = tokens[:cut]

    for token in tokens:
        if token.startswith("#") and (cat := parse_category(token[1:])) is not None:
            draft.category = cat
            continue
        if token.startswith("!") and (prio := parse_priority(token[1:])) is not None:
            draft.priority = prio
            continue
        if token.startswith("@") and (due := parse_due(token[1:], now_ts=now_ts)) is not None:
            draft.due_date = due
            continue
        if token.lower() == "+remind":
            draft.reminder_enabled = True
            continue
        words.append(token)

    draft.title = " ".join(words)
    return draft


def restore_reminders(store: TaskStore, reminders: ReminderPort, *, now_ts: float | None = None) -> int:
    """
    Re-arm reminders after a restart.

    The reminder table lives in memory, so on startup every open task with a
    reminder and a future due date is scheduled again. Returns how many were armed.
    """
    if now_ts is None:
        now_ts = time.time()

    armed = 0
    for task in store.tasks:
        if not task.reminder_enabled or task.is_completed or task.due_date is None:
            continue
        if task.due_date <= now_ts:
            continue
        try:
            reminders.schedule(task.id, REMINDER_TITLE, task.title, task.due_date)
            armed += 1
        except Exception:
            logger.exception("Failed to restore reminder task_id=%s", task.id)

    if armed:
        logger.info("Restored %d reminders", armed)
    return armed


def add_task_from_text(store: TaskStore, line: str, *, now_ts: float | None = None) -> Task | None:
    """
    Convenience helper for front-ends: parse one line and add it.

    Mirrors the add form: an empty title is rejected here, not by the store.
    """
    draft = parse_task_line(line, now_ts=now_ts)
    if not draft.title.strip():
        logger.debug("Rejected task line with empty title: %r", line)
        return None

    return store.add_task(
        draft.title,
        category=draft.category,
        priority=draft.priority,
        due_date=draft.due_date,
        notes=draft.notes,
        reminder_enabled=draft.reminder_enabled,
    )
