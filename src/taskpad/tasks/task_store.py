# tasks/task_store.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterable

from ..core.ports import ReminderPort, TaskPersistencePort
from .task_models import SortOption, Task, TaskCategory, TaskPriority
from .task_presentation import REMINDER_TITLE

logger = logging.getLogger(__name__)

StoreListener = Callable[["TaskStore"], None]


def _new_task_id() -> str:
    return str(uuid.uuid4())


def _sort_key(option: SortOption) -> Callable[[Task], object]:
    if option == SortOption.BY_PRIORITY:
        return lambda t: -int(t.priority)
    if option == SortOption.BY_DUE_DATE:
        # Tasks without a due date go after every task that has one.
        return lambda t: (t.due_date is None, t.due_date or 0.0)
    if option == SortOption.BY_CATEGORY:
        return lambda t: t.category.value
    return lambda t: -t.created_at


def _move(items: list[Task], from_positions: Iterable[int], to_position: int) -> list[Task]:
    """
    List move with drag-and-drop offsets.

    Items at from_positions are lifted out (keeping their relative order) and
    reinserted before the item that was at to_position; to_position == len(items)
    means "append".
    """
    picked_set = {p for p in from_positions if 0 <= p < len(items)}
    if not picked_set:
        return list(items)

    picked = sorted(picked_set)
    to_position = max(0, min(int(to_position), len(items)))
    moving = [items[p] for p in picked]
    rest = [t for i, t in enumerate(items) if i not in picked_set]
    insert_at = to_position - sum(1 for p in picked if p < to_position)
    return rest[:insert_at] + moving + rest[insert_at:]


class TaskStore:
    """
    Authoritative in-memory task collection (the app's view model).

    - `tasks` keeps insertion/reorder order; `filtered_tasks()` is the derived,
      filtered + sorted view shown to the user.
    - Position-based operations (delete/move) address the filtered view. They
      resolve positions to task ids first and only then touch `tasks`.
    - Every mutation persists the whole collection and notifies subscribers.
      Persistence and reminder failures are logged, never raised.
    """

    def __init__(
        self,
        persistence: TaskPersistencePort,
        reminders: ReminderPort,
        *,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = _new_task_id,
        sort_option: SortOption = SortOption.BY_CREATED_DATE,
    ) -> None:
        self._persistence = persistence
        self._reminders = reminders
        self._clock = clock
        self._id_factory = id_factory
        self._listeners: list[StoreListener] = []

        self.tasks: list[Task] = []
        self.selected_category: TaskCategory | None = None
        self.sort_option: SortOption = SortOption(sort_option)

        self._load()
        self._request_permission()

    # ---- observers ----

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener called after every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed: %r", listener)

    # ---- side effects ----

    def _load(self) -> None:
        try:
            self.tasks = list(self._persistence.load())
        except Exception:
            logger.exception("Task load failed; starting empty.")
            self.tasks = []

    def _save(self) -> None:
        try:
            self._persistence.save(self.tasks)
        except Exception:
            logger.exception("Task save failed (n=%d).", len(self.tasks))

    def _request_permission(self) -> None:
        try:
            self._reminders.request_permission()
        except Exception:
            logger.exception("Reminder permission request failed.")

    def _schedule_reminder(self, task: Task) -> None:
        if task.due_date is None:
            return
        try:
            self._reminders.schedule(task.id, REMINDER_TITLE, task.title, task.due_date)
        except Exception:
            logger.exception("Reminder schedule failed task_id=%s", task.id)

    def _cancel_reminder(self, task_id: str) -> None:
        try:
            self._reminders.cancel(task_id)
        except Exception:
            logger.exception("Reminder cancel failed task_id=%s", task_id)

    def flush(self) -> None:
        """Persist the current collection (mutations already do this; used on shutdown)."""
        self._save()

    def _commit(self) -> None:
        self._save()
        self._publish()

    # ---- reads ----

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def _index_of(self, task_id: str) -> int | None:
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return i
        return None

    def filtered_tasks(self) -> list[Task]:
        """Current view: category filter, then the active sort. Never mutates `tasks`."""
        view = self.tasks
        if self.selected_category is not None:
            view = [t for t in view if t.category == self.selected_category]
        return sorted(view, key=_sort_key(self.sort_option))

    # ---- view state ----

    def set_category_filter(self, category: TaskCategory | None) -> None:
        self.selected_category = TaskCategory(category) if category is not None else None
        self._publish()

    def toggle_category_filter(self, category: TaskCategory) -> TaskCategory | None:
        """Select `category`, or clear the filter when it is already selected."""
        if self.selected_category == category:
            self.set_category_filter(None)
        else:
            self.set_category_filter(category)
        return self.selected_category

    def set_sort_option(self, option: SortOption) -> None:
        self.sort_option = SortOption(option)
        self._publish()

    # ---- mutations ----

    def add_task(
        self,
        title: str,
        category: TaskCategory = TaskCategory.PERSONAL,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: float | None = None,
        notes: str | None = None,
        reminder_enabled: bool = False,
    ) -> Task:
        # Title validation is the caller's job; an empty title is stored as-is.
        task = Task(
            id=self._id_factory(),
            title=title,
            created_at=self._clock(),
            category=TaskCategory(category),
            priority=TaskPriority(priority),
            due_date=due_date,
            notes=notes,
            reminder_enabled=reminder_enabled,
        )
        self.tasks.append(task)
        self._save()

        if reminder_enabled and due_date is not None:
            self._schedule_reminder(task)

        logger.debug(
            "Task added id=%s category=%s priority=%s due=%s remind=%s",
            task.id,
            task.category.value,
            task.priority.name,
            due_date,
            reminder_enabled,
        )
        self._publish()
        return task

    def delete_tasks(self, positions: Iterable[int]) -> list[Task]:
        view = self.filtered_tasks()
        doomed: dict[str, Task] = {}
        for pos in positions:
            if 0 <= pos < len(view):
                doomed[view[pos].id] = view[pos]

        if not doomed:
            return []

        self.tasks = [t for t in self.tasks if t.id not in doomed]
        for task_id in doomed:
            self._cancel_reminder(task_id)

        logger.debug("Tasks deleted ids=%s", list(doomed))
        self._commit()
        return list(doomed.values())

    def move_task(self, from_positions: Iterable[int], to_position: int) -> None:
        view = self.filtered_tasks()
        moved = _move(view, from_positions, to_position)

        # Slots in `tasks` that hold view members get the moved order; the rest stay put.
        in_view = {t.id for t in view}
        slots = [i for i, t in enumerate(self.tasks) if t.id in in_view]
        for slot, task in zip(slots, moved):
            self.tasks[slot] = task

        self._commit()

    def toggle_completion(self, task: Task) -> Task | None:
        idx = self._index_of(task.id)
        if idx is None:
            return None

        current = self.tasks[idx]
        current.is_completed = not current.is_completed

        # A completed task must never fire a reminder. Un-completing does not re-schedule.
        if current.is_completed:
            self._cancel_reminder(current.id)

        self._commit()
        return current

    def update_title(self, task: Task, new_title: str) -> Task | None:
        idx = self._index_of(task.id)
        if idx is None:
            return None

        current = self.tasks[idx]
        current.title = new_title
        self._commit()
        return current
