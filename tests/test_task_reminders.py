# tests/test_task_reminders.py

from __future__ import annotations

import asyncio
import time
from datetime import datetime

import pytest

from taskpad.core.state import AppState
from taskpad.tasks.task_reminders import (
    LocalReminderScheduler,
    PermissionState,
    run_reminder_loop,
    start_reminders_in_background,
)
from taskpad.tasks.task_store import TaskStore

from .fakes import FakeAlertSink, FakeClock, FakePersistence


def _granted(allowed: bool = True, now: float = 0.0) -> LocalReminderScheduler:
    sched = LocalReminderScheduler(authorizer=lambda: allowed, clock=lambda: now)
    sched.request_permission()
    sched.resolve_permission()
    return sched


def test_fire_time_is_truncated_to_minute() -> None:
    sched = LocalReminderScheduler(clock=lambda: 0.0)
    fire_at = datetime(2026, 10, 18, 9, 30, 42, 500).timestamp()

    sched.schedule("t1", "Task Reminder", "Stretch", fire_at)

    (reminder,) = sched.pending()
    assert reminder.fire_at == datetime(2026, 10, 18, 9, 30).timestamp()


def test_schedule_replaces_and_cancel_is_idempotent() -> None:
    sched = LocalReminderScheduler(clock=lambda: 0.0)
    sched.schedule("t1", "Task Reminder", "old", 1_000_000.0)
    sched.schedule("t1", "Task Reminder", "new", 2_000_000.0)

    assert [r.body for r in sched.pending()] == ["new"]

    sched.cancel("t1")
    sched.cancel("t1")
    sched.cancel("never-scheduled")
    assert sched.pending() == []


def test_permission_requested_once_and_resolved_later() -> None:
    asked: list[int] = []

    def authorizer() -> bool:
        asked.append(1)
        return True

    sched = LocalReminderScheduler(authorizer=authorizer)
    assert sched.permission == PermissionState.NOT_REQUESTED

    sched.request_permission()
    sched.request_permission()
    assert sched.permission == PermissionState.PENDING
    assert asked == []

    assert sched.resolve_permission() == PermissionState.GRANTED
    assert sched.resolve_permission() == PermissionState.GRANTED
    assert asked == [1]


def test_nothing_fires_before_permission_resolves() -> None:
    sched = LocalReminderScheduler(clock=lambda: 0.0)
    sched.request_permission()
    sched.schedule("t1", "Task Reminder", "early bird", 60.0)

    assert sched.pop_due(now_ts=10_000.0) == []
    assert len(sched.pending()) == 1

    sched.resolve_permission()
    assert [r.task_id for r in sched.pop_due(now_ts=10_000.0)] == ["t1"]


def test_pop_due_returns_only_due_reminders_once() -> None:
    sched = _granted()
    sched.schedule("soon", "Task Reminder", "soon", 600.0)
    sched.schedule("later", "Task Reminder", "later", 6_000.0)

    assert [r.task_id for r in sched.pop_due(now_ts=1_000.0)] == ["soon"]
    assert sched.pop_due(now_ts=1_000.0) == []
    assert [r.task_id for r in sched.pending()] == ["later"]


def test_denied_permission_accepts_but_never_fires() -> None:
    sched = _granted(allowed=False)
    assert sched.permission == PermissionState.DENIED

    sched.schedule("t1", "Task Reminder", "silent", 60.0)
    assert len(sched.pending()) == 1

    assert sched.pop_due(now_ts=10_000.0) == []
    assert sched.pending() == []


def test_past_fire_time_is_not_scheduled() -> None:
    now = datetime(2026, 10, 17, 12, 0, 30).timestamp()
    sched = _granted(now=now)

    sched.schedule("t1", "Task Reminder", "Submit report", now - 3600)
    # Same minute as now: the seconds are dropped, so this one has passed too.
    sched.schedule("t2", "Task Reminder", "Stand-up", now + 15)

    assert sched.pending() == []
    assert sched.pop_due(now_ts=now + 86400) == []


def test_rescheduling_into_the_past_drops_the_old_reminder() -> None:
    now = datetime(2026, 10, 17, 12, 0).timestamp()
    sched = LocalReminderScheduler(clock=lambda: now)
    sched.schedule("t1", "Task Reminder", "Submit report", now + 3600)

    sched.schedule("t1", "Task Reminder", "Submit report", now - 60)

    assert sched.pending() == []


def test_store_does_not_alert_for_overdue_task() -> None:
    now = datetime(2026, 10, 17, 12, 0).timestamp()
    sched = _granted(now=now)
    store = TaskStore(FakePersistence(), sched, clock=lambda: now)

    store.add_task("Submit report", due_date=now - 3600, reminder_enabled=True)

    assert sched.pop_due(now_ts=now) == []


def test_authorizer_error_counts_as_denied() -> None:
    def broken() -> bool:
        raise RuntimeError("no notification daemon")

    sched = LocalReminderScheduler(authorizer=broken)
    sched.request_permission()
    assert sched.resolve_permission() == PermissionState.DENIED


@pytest.mark.asyncio
async def test_loop_shows_due_reminder_once() -> None:
    clock = FakeClock(start=time.time() - 600, step=0.0)
    sched = LocalReminderScheduler(clock=clock)
    sched.request_permission()
    sched.schedule("t1", "Task Reminder", "Water plants", time.time() - 120)
    sched.schedule("t2", "Task Reminder", "Next week", time.time() + 7 * 86400)
    clock.now = time.time()
    sink = FakeAlertSink()

    runner = asyncio.create_task(run_reminder_loop(sched, sink, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert [(a.title, a.body) for a in sink.shown] == [("Task Reminder", "Water plants")]
    assert [r.task_id for r in sched.pending()] == ["t2"]


@pytest.mark.asyncio
async def test_loop_drops_reminder_when_sink_fails() -> None:
    clock = FakeClock(start=time.time() - 600, step=0.0)
    sched = LocalReminderScheduler(clock=clock)
    sched.request_permission()
    sched.schedule("t1", "Task Reminder", "lost", time.time() - 120)
    clock.now = time.time()
    sink = FakeAlertSink(fail=True)

    runner = asyncio.create_task(run_reminder_loop(sched, sink, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert sink.shown == []
    assert sched.pending() == []


def test_background_runner_fires_and_stops(state: AppState) -> None:
    sink = FakeAlertSink()
    clock = FakeClock(start=time.time() - 600, step=0.0)
    state.reminders = LocalReminderScheduler(clock=clock)
    state.reminders.request_permission()
    state.reminders.schedule("t1", "Task Reminder", "From the thread", time.time() - 120)
    clock.now = time.time()

    runner = start_reminders_in_background(state, sink)
    assert runner is not None

    deadline = time.time() + 5.0
    while not sink.shown and time.time() < deadline:
        time.sleep(0.01)

    runner.stop()
    runner.join(timeout=5.0)

    assert [a.body for a in sink.shown] == ["From the thread"]
    assert not runner.thread.is_alive()


def test_background_runner_respects_disabled_setting(state: AppState) -> None:
    state.settings.reminders_enabled = False
    assert start_reminders_in_background(state, FakeAlertSink()) is None
