# tasks/task_reminders.py

from __future__ import annotations

"""
Local reminders.

LocalReminderScheduler keeps one pending, non-repeating alert per task id.
run_reminder_loop is a small polling loop that:
- resolves the one-time permission request,
- pops reminders whose fire time has passed,
- shows them via an injected AlertSink.

How an alert is displayed belongs to the front-end, not the scheduler.
"""

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from ..core.ports import AlertSink

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)


class PermissionState(StrEnum):
    NOT_REQUESTED = "not_requested"
    PENDING = "pending"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(slots=True, frozen=True)
class Reminder:
    task_id: str
    title: str
    body: str
    fire_at: float


def truncate_to_minute(ts: float) -> float:
    """Drop seconds: keep local year/month/day/hour/minute only."""
    return datetime.fromtimestamp(ts).replace(second=0, microsecond=0).timestamp()


class LocalReminderScheduler:
    """
    In-process reminder table.

    Thread-safety:
    - schedule/cancel are called from the UI thread,
    - pop_due is called from the reminder loop thread,
    so the pending table is guarded by a lock.
    """

    def __init__(
        self,
        *,
        authorizer: Callable[[], bool] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._authorizer = authorizer or (lambda: True)
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: dict[str, Reminder] = {}
        self._permission = PermissionState.NOT_REQUESTED

    @property
    def permission(self) -> PermissionState:
        return self._permission

    def request_permission(self) -> None:
        """
        Ask once; never blocks.

        The answer is resolved later by resolve_permission() on the reminder loop.
        """
        with self._lock:
            if self._permission != PermissionState.NOT_REQUESTED:
                return
            self._permission = PermissionState.PENDING
        logger.debug("Reminder permission requested")

    def resolve_permission(self) -> PermissionState:
        with self._lock:
            if self._permission != PermissionState.PENDING:
                return self._permission

        try:
            granted = bool(self._authorizer())
        except Exception:
            logger.exception("Reminder permission check failed; treating as denied.")
            granted = False

        with self._lock:
            if self._permission == PermissionState.PENDING:
                self._permission = PermissionState.GRANTED if granted else PermissionState.DENIED
            state = self._permission

        logger.info("Reminder permission %s", state.value)
        return state

    def schedule(self, task_id: str, title: str, body: str, fire_at: float) -> None:
        reminder = Reminder(
            task_id=str(task_id),
            title=title,
            body=body,
            fire_at=truncate_to_minute(float(fire_at)),
        )
        if reminder.fire_at <= self._clock():
            # A one-shot minute trigger never fires for a minute already reached.
            with self._lock:
                self._pending.pop(reminder.task_id, None)
            logger.debug(
                "Reminder not scheduled, time already passed task_id=%s fire_at=%s",
                reminder.task_id,
                reminder.fire_at,
            )
            return

        with self._lock:
            replaced = reminder.task_id in self._pending
            self._pending[reminder.task_id] = reminder
        logger.debug(
            "Reminder scheduled task_id=%s fire_at=%s replaced=%s",
            reminder.task_id,
            reminder.fire_at,
            replaced,
        )

    def cancel(self, task_id: str) -> None:
        with self._lock:
            removed = self._pending.pop(str(task_id), None)
        if removed is not None:
            logger.debug("Reminder cancelled task_id=%s", task_id)

    def pending(self) -> list[Reminder]:
        with self._lock:
            items = list(self._pending.values())
        items.sort(key=lambda r: (r.fire_at, r.task_id))
        return items

    def pop_due(self, now_ts: float | None = None) -> list[Reminder]:
        """
        Remove and return reminders with fire_at <= now.

        Nothing is popped while permission is unresolved. With permission denied,
        due reminders are discarded and never returned.
        """
        if now_ts is None:
            now_ts = self._clock()

        with self._lock:
            if self._permission in (PermissionState.NOT_REQUESTED, PermissionState.PENDING):
                return []

            due = [r for r in self._pending.values() if r.fire_at <= now_ts]
            for r in due:
                del self._pending[r.task_id]
            permission = self._permission

        if permission == PermissionState.DENIED:
            if due:
                logger.debug("Dropped %d due reminders (permission denied)", len(due))
            return []

        due.sort(key=lambda r: (r.fire_at, r.task_id))
        return due


async def run_reminder_loop(
        reminders: LocalReminderScheduler,
        sink: AlertSink,
        *,
        interval_seconds: float = 15.0,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds:
    - resolve the pending permission request (first tick only)
    - pop due reminders
    - show each via sink.show_alert(...)
      On failure the reminder is dropped: alerts do not repeat and are not retried.

    To stop the loop, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while True:
        try:
            reminders.resolve_permission()
            due = reminders.pop_due()
        except Exception:
            logger.exception("pop_due failed")
            due = []

        for reminder in due:
            try:
                await sink.show_alert(title=reminder.title, body=reminder.body)
                logger.info("Reminder fired task_id=%s", reminder.task_id)
            except Exception:
                logger.exception("show_alert failed task_id=%s", reminder.task_id)

        await asyncio.sleep(sleep_s)


@dataclass(slots=True)
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task[None]

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except Exception:
            logger.debug("Failed to signal reminder loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(
    state: AppState, sink: AlertSink
) -> ReminderBackgroundRunner | None:
    """
    Start the reminder loop in a background thread.

    The console REPL blocks on input(), while the reminder loop is async and
    wants its own event loop.
    """
    if not state.settings.reminders_enabled:
        logger.info("Reminders disabled, not starting.")
        return None

    interval = float(getattr(state.settings, "reminder_poll_seconds", 15.0))
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        task = loop.create_task(
            run_reminder_loop(state.reminders, sink, interval_seconds=interval)
        )

        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(task)
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="taskpad-reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder background thread started (interval=%.1fs).", interval)
    return ReminderBackgroundRunner(thread=t, loop=loop, task=task)
