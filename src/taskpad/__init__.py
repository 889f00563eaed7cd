"""taskpad: a personal task tracker with local persistence and reminders."""

__version__ = "0.1.0"
