"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskCategory, TaskPriority, SortOption)
- task_presentation.py: display metadata for the enumerations
- task_persistence.py: SQLite key-value store + whole-collection JSON persistence
- task_reminders.py: local reminder table and the polling loop that fires it
- task_store.py: the authoritative task collection (filter/sort/mutations)
- task_api.py: small high-level helpers used by front-ends
"""
