# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKPAD_APP_NAME": "App display name (default: taskpad).",
    "TASKPAD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Front-end
    "TASKPAD_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    "TASKPAD_DEFAULT_SORT": (
        "Initial sort: by_created_date | by_priority | by_due_date | by_category "
        "(default: by_created_date)."
    ),
    # Reminders
    "TASKPAD_REMINDERS_ENABLED": "Run the reminder loop at all (true/false, default: true).",
    "TASKPAD_REMINDERS_ALLOWED": (
        "Answer to the one-time reminder permission request (default: true). "
        "When false, reminders are accepted but never shown."
    ),
    "TASKPAD_REMINDER_POLL_SECONDS": "How often due reminders are checked (default: 15, min 0.5).",
    # Paths (gitignored)
    "TASKPAD_DATA_DIR": "Local data directory for the database and logs (default: .local/taskpad).",
    "TASKPAD_TASKS_DB_PATH": "SQLite key-value file (default: <data_dir>/taskpad.sqlite3).",
}
