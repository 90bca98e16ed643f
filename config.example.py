# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: taskflow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: INFO).",
    # Storage (gitignored)
    "TASKFLOW_DATA_DIR": "Local data directory (default: .local/taskflow).",
    "TASKFLOW_DB_PATH": "SQLite path (default: <data_dir>/taskflow.sqlite3).",
    "TASKFLOW_STORAGE_NAMESPACE": "Key prefix for stored collections (default: taskflow).",
    # Timer / alerts
    "TASKFLOW_TICK_INTERVAL_SECONDS": "Countdown tick period (default: 1.0).",
    "TASKFLOW_SOUND_ENABLED": "Start with alerts on (true/false, default: true).",
    "TASKFLOW_NOTIFICATION_ICON": "Icon reference passed with alerts (default: /logo.svg).",
    # Connectors
    "TASKFLOW_CONSOLE_ENABLED": "Enable the console REPL (true/false).",
    "TASKFLOW_MATRIX_ENABLED": "Also post alerts to a Matrix room (true/false).",
    # Matrix
    "TASKFLOW_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "TASKFLOW_MATRIX_USER_ID": "Matrix user ID used to post alerts.",
    "TASKFLOW_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "TASKFLOW_MATRIX_ROOM_ID": "Room that receives alerts.",
    "TASKFLOW_MATRIX_STORE_PATH": "Session store path (default: <data_dir>/matrix_store).",
}
