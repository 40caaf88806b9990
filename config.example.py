# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; put them in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "TASKLANE_APP_NAME": "App display name (default: tasklane).",
    "TASKLANE_LOG_LEVEL": "Console logging level (default: INFO).",
    "TASKLANE_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Local data
    "TASKLANE_DATA_DIR": "Directory for the task database, identity file and logs (default: .local/tasklane).",
    "TASKLANE_TASKS_DB_PATH": "SQLite file holding all users' tasks (default: <data dir>/tasks.sqlite3).",
    "TASKLANE_IDENTITY_PATH": "File holding the anonymous user id (default: <data dir>/identity.txt).",
    # Session
    "TASKLANE_USER_ID": "Explicit user id; overrides the anonymous identity.",
    # Extraction service (OpenAI-compatible)
    "TASKLANE_LLM_API_KEY": "API key; OPENAI_API_KEY is used when unset. Without a key, smart modes fall back.",
    "TASKLANE_LLM_BASE_URL": "Base URL (default: https://api.openai.com/v1).",
    "TASKLANE_LLM_MODELS": "Comma/space separated list of models to try in order (default: gpt-4o-mini).",
    "TASKLANE_LLM_TIMEOUT_SECONDS": "Read timeout for one model call (default: 30).",
    "TASKLANE_HTTP_REFERER": "Optional OpenRouter metadata header.",
    # Live sync
    "TASKLANE_SYNC_POLL_SECONDS": "How often to check the store for changes made elsewhere (default: 1.0).",
}
