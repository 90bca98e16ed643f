"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, breaks)
- task_store.py: in-memory authoritative collection with change listeners
- task_lifecycle.py: state transitions and time accounting
- task_timer.py: 1 Hz countdown driver for the active task
- task_stats.py: totals over the whole store + display formatting
- task_notifications.py: "time complete" / "task completed" events
- task_filters.py: read-only status/priority/search filtering for display
"""
