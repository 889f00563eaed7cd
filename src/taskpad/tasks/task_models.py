# tasks/task_models.py

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Any


class TaskCategory(StrEnum):
    """Fixed task classification. The value is the stored canonical label."""

    HOME = "home"
    WORK = "work"
    SCHOOL = "school"
    PERSONAL = "personal"
    SHOPPING = "shopping"


class TaskPriority(IntEnum):
    """Ordered urgency. The value is the stored rank (higher = more urgent)."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2


class SortOption(StrEnum):
    BY_CREATED_DATE = "by_created_date"
    BY_PRIORITY = "by_priority"
    BY_DUE_DATE = "by_due_date"
    BY_CATEGORY = "by_category"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: float

    is_completed: bool = False
    category: TaskCategory = TaskCategory.PERSONAL
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: float | None = None
    notes: str | None = None
    reminder_enabled: bool = False

    def is_overdue_at(self, now_ts: float) -> bool:
        if self.due_date is None:
            return False
        return not self.is_completed and self.due_date < now_ts

    @property
    def is_overdue(self) -> bool:
        return self.is_overdue_at(time.time())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "is_completed": self.is_completed,
            "created_at": self.created_at,
            "category": self.category.value,
            "priority": int(self.priority),
            "due_date": self.due_date,
            "notes": self.notes,
            "reminder_enabled": self.reminder_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Strict decode of one stored task.

        Unknown enum codes, missing keys and wrong types raise; callers decide
        whether that drops one entry or the whole collection.
        """
        if not isinstance(data, dict):
            raise TypeError(f"task entry must be a dict, got {type(data).__name__}")

        due_raw = data["due_date"]
        notes_raw = data["notes"]

        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            created_at=float(data["created_at"]),
            is_completed=bool(data["is_completed"]),
            category=TaskCategory(data["category"]),
            priority=TaskPriority(int(data["priority"])),
            due_date=float(due_raw) if due_raw is not None else None,
            notes=str(notes_raw) if notes_raw is not None else None,
            reminder_enabled=bool(data["reminder_enabled"]),
        )
