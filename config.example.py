# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Put them in .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "BIZBOARD_APP_NAME": "App display name (default: bizboard).",
    "BIZBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    # Data
    "BIZBOARD_DATA_DIR": "Local data directory (default: .local/bizboard).",
    "BIZBOARD_STORE_DB_PATH": "Row store SQLite path (default: <data_dir>/store.sqlite3).",
    "BIZBOARD_REMOTE_STORE_ENABLED": "Use the row store at all (true/false, default: true).",
    "BIZBOARD_MOCK_LATENCY_SECONDS": "Simulated delay for demo-data answers (default: 0.3).",
    # Auth
    "BIZBOARD_USER_ID": "Signed-in user id (empty => first demo user).",
    # LLM / OpenRouter
    "BIZBOARD_OPENROUTER_API_KEY": "OpenRouter API key (OPENROUTER_API_KEY is accepted too).",
    "BIZBOARD_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "BIZBOARD_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "BIZBOARD_LLM_TEMPERATURE": "Sampling temperature for task generation (default: 0.7).",
    "BIZBOARD_LLM_TIMEOUT_SECONDS": "Per-request timeout for LLM and endpoint calls (default: 60).",
    "BIZBOARD_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "BIZBOARD_APP_TITLE": "Optional OpenRouter metadata header title.",
    # Generation endpoint
    "BIZBOARD_GENERATE_ENDPOINT_URL": "If set, the console asks this endpoint for tasks instead of calling the LLM.",
    "BIZBOARD_API_HOST": "Bind host for bizboard-api (default: 127.0.0.1).",
    "BIZBOARD_API_PORT": "Bind port for bizboard-api (default: 8000).",
}
