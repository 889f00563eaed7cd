# tests/test_logging_setup.py

from __future__ import annotations

import logging
import logging.handlers
from collections.abc import Iterator
from pathlib import Path

import pytest

from taskpad.logging_setup import _PrefixLevelFilter, console_threshold, setup_logging


def _ours(handler: logging.Handler) -> bool:
    return isinstance(handler, logging.handlers.RotatingFileHandler) or any(
        isinstance(f, _PrefixLevelFilter) for f in handler.filters
    )


@pytest.fixture()
def root_logging() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    level = root.level
    yield root
    for h in list(root.handlers):
        if _ours(h):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging.captureWarnings(False)


def test_console_threshold_uses_longest_prefix() -> None:
    assert console_threshold("taskpad.tasks.task_store") == logging.DEBUG
    assert console_threshold("taskpad.tasks.task_reminders") == logging.WARNING
    assert console_threshold("py.warnings") == logging.ERROR
    assert console_threshold("asyncio") == logging.ERROR
    # Not a dotted child of "taskpad".
    assert console_threshold("taskpadx") == logging.ERROR


def test_setup_logging_writes_debug_to_file_and_replaces_handlers(
    root_logging: logging.Logger, tmp_path: Path
) -> None:
    setup_logging(log_dir=tmp_path, console_level="warning")
    log_file = setup_logging(log_dir=tmp_path, console_level="warning")

    assert len([h for h in root_logging.handlers if _ours(h)]) == 2

    logging.getLogger("taskpad.tasks.task_reminders").debug("tick")
    for h in root_logging.handlers:
        h.flush()

    assert log_file == tmp_path / "taskpad.log"
    assert "taskpad.tasks.task_reminders: tick" in log_file.read_text(encoding="utf-8")
