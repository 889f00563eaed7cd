# src/taskpad/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store depends on Protocols instead of concrete implementations.
This keeps storage/reminder backends swappable and makes testing easier.
"""

from typing import Any, Awaitable, Protocol


class KeyValueStorePort(Protocol):
    """Tiny local key-value store holding opaque blobs."""

    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> None: ...
    def delete(self, key: str) -> None: ...


class TaskPersistencePort(Protocol):
    """
    Whole-collection persistence.

    save() overwrites everything; load() returns [] when nothing usable is stored.
    Neither method raises.
    """

    def save(self, tasks: list[Any]) -> bool: ...
    def load(self) -> list[Any]: ...


class ReminderPort(Protocol):
    """
    One pending, non-repeating alert per task id.

    schedule() replaces any previous alert with the same id; cancel() is a no-op
    when nothing is pending.
    """

    def request_permission(self) -> None: ...

    def schedule(self, task_id: str, title: str, body: str, fire_at: float) -> None: ...

    def cancel(self, task_id: str) -> None: ...


class AlertSink(Protocol):
    """Front-end side port: how the reminder loop shows a fired alert."""

    def show_alert(self, *, title: str, body: str) -> Awaitable[None]: ...
