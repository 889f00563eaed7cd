# src/taskpad/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder loop in a background thread (optional),
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleAlertSink, run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_reminders import ReminderBackgroundRunner, start_reminders_in_background

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort final save (no exceptions should escape)."""
    try:
        with state.lock:
            state.store.flush()
    except Exception:
        logger.exception("Final task save failed.")


def main() -> None:
    settings = get_settings()

    log_dir = getattr(settings, "data_dir", ".local/taskpad")
    setup_logging(log_dir=log_dir, console_level=getattr(settings, "log_level", "INFO"))

    logger.info("Starting %s...", getattr(settings, "app_name", "taskpad"))

    state = create_initial_state(settings=settings)

    reminder_runner: ReminderBackgroundRunner | None = start_reminders_in_background(
        state, ConsoleAlertSink()
    )

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        if reminder_runner is not None:
            reminder_runner.stop()
            reminder_runner.join(timeout=5.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
