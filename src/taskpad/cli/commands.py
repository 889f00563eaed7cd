# src/taskpad/cli/commands.py

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..core.state import AppState
from ..tasks.task_api import add_task_from_text
from ..tasks.task_models import SortOption, Task
from ..tasks.task_presentation import category_style, parse_category, priority_style

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_SORT_ALIASES = {
    "created": SortOption.BY_CREATED_DATE,
    "date": SortOption.BY_CREATED_DATE,
    "priority": SortOption.BY_PRIORITY,
    "due": SortOption.BY_DUE_DATE,
    "category": SortOption.BY_CATEGORY,
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def format_task_row(position: int, task: Task, now_ts: float) -> str:
    mark = "x" if task.is_completed else " "
    cat = category_style(task.category).title
    prio = priority_style(task.priority).title
    line = f"{position:>3}. [{mark}] {task.title}  ({cat}, {prio})"
    if task.due_date is not None:
        line += f"  due {_fmt_ts(task.due_date)}"
        if task.reminder_enabled:
            line += " *"
    if task.is_overdue_at(now_ts):
        line += "  OVERDUE"
    if task.notes:
        line += f"\n       {task.notes}"
    return line


def render_tasks(state: AppState) -> str:
    store = state.store
    view = store.filtered_tasks()
    scope = category_style(store.selected_category).title if store.selected_category else "All"
    header = f"Tasks ({scope}, {store.sort_option.value}): {len(view)}"
    if not view:
        return header + "\n  (nothing here yet - add one with /add <title>)"

    now_ts = time.time()
    rows = [format_task_row(i, t, now_ts) for i, t in enumerate(view, start=1)]
    return "\n".join([header, *rows])


def _parse_positions(args: list[str]) -> list[int] | None:
    """1-based positions as typed -> 0-based view positions. None if any is not a number."""
    out: list[int] = []
    for a in args:
        try:
            out.append(int(a) - 1)
        except ValueError:
            return None
    return out


def _task_at(state: AppState, raw: str) -> Task | None:
    positions = _parse_positions([raw])
    if not positions:
        return None
    view = state.store.filtered_tasks()
    pos = positions[0]
    return view[pos] if 0 <= pos < len(view) else None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_tasks(state)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title> [#category] [!priority] [@due] [+remind] [-- notes]
    """
    if not args:
        return "Usage: /add <title> [#category] [!low|!medium|!high] [@due] [+remind] [-- notes]"

    task = add_task_from_text(state.store, " ".join(args))
    if task is None:
        return "A task needs a title."

    note = ""
    if task.reminder_enabled and task.due_date is None:
        note = " (reminder ignored: no due time)"
    elif task.reminder_enabled and not any(r.task_id == task.id for r in state.reminders.pending()):
        note = " (no reminder: due time has passed)"
    elif task.reminder_enabled and emit is not None:
        emit(f"Reminder set for {_fmt_ts(task.due_date or 0.0)}.")
    return f"Added: {task.title}{note}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        return "Usage: /done <position>"
    task = _task_at(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."
    updated = state.store.toggle_completion(task)
    if updated is None:
        return "That task no longer exists."
    return f"{'Completed' if updated.is_completed else 'Reopened'}: {updated.title}"


def cmd_rename(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /rename <position> <new title>"
    task = _task_at(state, args[0])
    if task is None:
        return f"No task at position {args[0]}."
    new_title = " ".join(args[1:]).strip()
    if not new_title:
        return "A task needs a title."
    state.store.update_title(task, new_title)
    return f"Renamed to: {new_title}"


def cmd_rm(state: AppState, args: list[str]) -> str:
    positions = _parse_positions(args)
    if not args or positions is None:
        return "Usage: /rm <position> [position...]"
    removed = state.store.delete_tasks(positions)
    if not removed:
        return "Nothing removed."
    return "Removed: " + ", ".join(t.title for t in removed)


def cmd_mv(state: AppState, args: list[str]) -> str:
    """
    /mv <from...> <to>   positions as shown by /list; <to> may be one past the end.
    """
    positions = _parse_positions(args)
    if len(args) < 2 or positions is None:
        return "Usage: /mv <position> [position...] <to>"
    *sources, target = positions
    state.store.move_task(sources, target)
    return "Moved."


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter            -> show current filter
    /filter all        -> clear
    /filter <category> -> select (or clear when already selected)
    """
    store = state.store
    if not args:
        current = category_style(store.selected_category).title if store.selected_category else "All"
        return f"Filter: {current}. Use /filter <category> or /filter all."

    arg = args[0].lower()
    if arg in ("all", "none", "off"):
        store.set_category_filter(None)
        return "Filter cleared."

    cat = parse_category(arg)
    if cat is None:
        return "Unknown category. Choose one of: home, work, school, personal, shopping."
    selected = store.toggle_category_filter(cat)
    return f"Filter: {category_style(selected).title}." if selected else "Filter cleared."


def cmd_sort(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() not in _SORT_ALIASES:
        return "Usage: /sort created | priority | due | category"
    option = _SORT_ALIASES[args[0].lower()]
    state.store.set_sort_option(option)
    return f"Sorted {option.value}."


def cmd_reminders(state: AppState, args: list[str]) -> str:
    pending = state.reminders.pending()
    head = f"Reminders ({state.reminders.permission.value}): {len(pending)} pending"
    if not pending:
        return head
    lines = [head]
    for r in pending:
        lines.append(f"  {_fmt_ts(r.fire_at)}  {r.body}")
    return "\n".join(lines)


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.store
    total = len(store.tasks)
    done = sum(1 for t in store.tasks if t.is_completed)
    now_ts = time.time()
    overdue = sum(1 for t in store.tasks if t.is_overdue_at(now_ts))
    return (
        "Status:\n"
        f"  Tasks: {total} ({done} done, {overdue} overdue)\n"
        f"  Sort: {store.sort_option.value}\n"
        f"  Reminders: {state.reminders.permission.value}, {len(state.reminders.pending())} pending"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show the current task view.", aliases=["ls"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [#category] [!priority] [@+30m|@HH:MM|@YYYY-MM-DDTHH:MM] [+remind] [-- notes].",
)
registry.register("done", cmd_done, help_text="Toggle completion: /done <position>.")
registry.register("rename", cmd_rename, help_text="Change a title: /rename <position> <title>.")
registry.register("rm", cmd_rm, help_text="Delete tasks: /rm <position> [position...].", aliases=["del"])
registry.register("mv", cmd_mv, help_text="Reorder: /mv <position> [position...] <to>.")
registry.register("filter", cmd_filter, help_text="Category filter: /filter <category> | /filter all.")
registry.register("sort", cmd_sort, help_text="Sort: /sort created | priority | due | category.")
registry.register("reminders", cmd_reminders, help_text="List pending reminders.")
registry.register("status", cmd_status, help_text="Show totals and reminder state.")
