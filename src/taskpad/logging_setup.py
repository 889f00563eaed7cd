# src/taskpad/logging_setup.py

"""
Logging for the taskpad process.

stderr gets a short, filtered stream so the prompt stays readable; the
rotating file under the data dir keeps everything at DEBUG.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

LOG_FILE_NAME = "taskpad.log"

# Minimum level shown on the console per logger-name prefix (longest prefix wins).
CONSOLE_THRESHOLDS: dict[str, int] = {
    "taskpad": logging.DEBUG,
    # Ticks on the reminder thread; the alert itself is printed by the sink.
    "taskpad.tasks.task_reminders": logging.WARNING,
    "py.warnings": logging.ERROR,
}
_DEFAULT_THRESHOLD = logging.ERROR


def console_threshold(name: str) -> int:
    best = ""
    for prefix in CONSOLE_THRESHOLDS:
        if (name == prefix or name.startswith(prefix + ".")) and len(prefix) > len(best):
            best = prefix
    return CONSOLE_THRESHOLDS[best] if best else _DEFAULT_THRESHOLD


class _PrefixLevelFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= console_threshold(record.name)


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskpad",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
) -> Path:
    """
    Install the console and file handlers on the root logger.

    Safe to call again: handlers from an earlier call are replaced. Returns the
    log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_resolve_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(_PrefixLevelFilter())
    root.addHandler(console)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(_resolve_level(file_level))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
