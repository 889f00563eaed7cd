# src/taskpad/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import render_tasks
from ..core.state import AppState

logger = logging.getLogger(__name__)

# Commands that only read state; everything else may change the view.
_READ_ONLY = {"help", "h", "?", "list", "ls", "reminders", "status"}


# Serializes terminal output between the REPL and alerts from the reminder thread.
OUTPUT_LOCK = threading.Lock()


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _say(text: str) -> None:
    with OUTPUT_LOCK:
        print(text, flush=True)


def _print_ts(text: str) -> None:
    _say(f"[{_ts_local()}] {text}")


class ConsoleAlertSink:
    """
    AlertSink that prints reminders into the terminal.

    Called from the reminder thread; writes take OUTPUT_LOCK, the same lock
    the REPL prints under, so an alert never lands inside a listing.
    """

    def __init__(self, out=None) -> None:
        self._out = out

    async def show_alert(self, *, title: str, body: str) -> None:
        out = self._out or sys.stdout
        with OUTPUT_LOCK:
            out.write(f"\n[{_ts_local()}] \a** {title}: {body} **\n")
            out.flush()


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tasks=%d).", len(state.store.tasks))
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")
    _say(render_tasks(state))

    lock = state.lock
    changed = {"dirty": False}

    def on_change(_store) -> None:
        changed["dirty"] = True

    unsubscribe = state.store.subscribe(on_change)

    def emit(text: str) -> None:
        _print_ts(text)

    try:
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                _say("")
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            # Plain text is a quick add.
            line = user_input if user_input.startswith("/") else f"/add {user_input}"
            name = line[1:].split(maxsplit=1)[0].lower() if len(line) > 1 else ""

            changed["dirty"] = False
            try:
                with lock:
                    response = command_registry.handle(state, line, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response:
                _print_ts(response)

            if changed["dirty"] and name not in _READ_ONLY:
                _say(render_tasks(state))
    finally:
        unsubscribe()

    logger.info("Console connector finished.")
