# tasks/task_presentation.py

"""
Display metadata for task enumerations.

Front-ends look codes up here; the task model itself stays presentation-free.
Icon names follow the SF Symbols naming used by the mobile client.
"""

from __future__ import annotations

from dataclasses import dataclass

from .task_models import TaskCategory, TaskPriority


@dataclass(frozen=True, slots=True)
class CategoryStyle:
    title: str
    icon: str
    gradient: tuple[str, str]


@dataclass(frozen=True, slots=True)
class PriorityStyle:
    title: str
    color: str


CATEGORY_STYLES: dict[TaskCategory, CategoryStyle] = {
    TaskCategory.HOME: CategoryStyle("Home", "house.fill", ("#4158D0", "#C850C0")),
    TaskCategory.WORK: CategoryStyle("Work", "briefcase.fill", ("#0093E9", "#80D0C7")),
    TaskCategory.SCHOOL: CategoryStyle("School", "book.fill", ("#8EC5FC", "#E0C3FC")),
    TaskCategory.PERSONAL: CategoryStyle("Personal", "person.fill", ("#FF9A8B", "#FF6A88")),
    TaskCategory.SHOPPING: CategoryStyle("Shopping", "cart.fill", ("#FBAB7E", "#F7CE68")),
}

PRIORITY_STYLES: dict[TaskPriority, PriorityStyle] = {
    TaskPriority.LOW: PriorityStyle("Low", "green"),
    TaskPriority.MEDIUM: PriorityStyle("Medium", "orange"),
    TaskPriority.HIGH: PriorityStyle("High", "red"),
}

# Fixed title of every reminder alert; the body is the task title.
REMINDER_TITLE = "Task Reminder"


def category_style(category: TaskCategory) -> CategoryStyle:
    return CATEGORY_STYLES[category]


def priority_style(priority: TaskPriority) -> PriorityStyle:
    return PRIORITY_STYLES[priority]


def parse_category(raw: str) -> TaskCategory | None:
    """Accept a canonical code or a display title, case-insensitive."""
    s = (raw or "").strip().lower()
    if not s:
        return None
    for cat, style in CATEGORY_STYLES.items():
        if s in (cat.value, style.title.lower()):
            return cat
    return None


def parse_priority(raw: str) -> TaskPriority | None:
    s = (raw or "").strip().lower()
    if not s:
        return None
    for prio, style in PRIORITY_STYLES.items():
        if s in (prio.name.lower(), style.title.lower(), str(int(prio))):
            return prio
    return None
