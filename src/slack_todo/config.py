# src/slack_todo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time; the entrypoint checks missing_required().
- Every TODO_* variable falls back to its legacy unprefixed name
  (SLACK_BOT_TOKEN, MONGODB_URI, PORT, ...).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TODO"

ENV_VARS = {
    # Slack
    "TODO_SLACK_BOT_TOKEN": "Bot token (xoxb-...). Fallback: SLACK_BOT_TOKEN.",
    "TODO_SLACK_SIGNING_SECRET": "Signing secret. Fallback: SLACK_SIGNING_SECRET.",
    "TODO_SLACK_APP_TOKEN": "App-level token for socket mode (xapp-...). Fallback: SLACK_APP_TOKEN.",
    # Store
    "TODO_STORE_URI": "mongodb://host/db or sqlite:///path. Fallback: MONGODB_URI.",
    "TODO_STORE_TIMEOUT_MS": "Store connect/socket timeout in ms (default: 5000).",
    "TODO_STORE_MAX_RETRIES": "Retry attempts for transient store failures (default: 3).",
    # Health server
    "TODO_PORT": "Health server port (default: 10000). Fallback: PORT.",
    "TODO_HOST": "Health server bind address (default: 0.0.0.0).",
    # App / logging
    "TODO_APP_NAME": "App display name (default: slack-todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    "TODO_DATA_DIR": "Local data directory for logs and SQLite (default: .local/slack-todo).",
    # Switches
    "TODO_SLACK_ENABLED": "Run the Slack socket-mode connector (default: true).",
    "TODO_CONSOLE_ENABLED": "Run the local console REPL (default: false).",
    "TODO_HEALTH_ENABLED": "Run the HTTP health server (default: true).",
}


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Switches ----
    slack_enabled: bool
    console_enabled: bool
    health_enabled: bool

    # ---- Slack ----
    slack_bot_token: str
    slack_signing_secret: str
    slack_app_token: str

    # ---- Store ----
    store_uri: str
    store_timeout_ms: int
    store_max_retries: int

    # ---- Health server ----
    host: str
    port: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "slack-todo")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/slack-todo"))

        slack_bot_token = (_first_env(_k("SLACK_BOT_TOKEN"), "SLACK_BOT_TOKEN", default="") or "").strip()
        slack_signing_secret = (
            _first_env(_k("SLACK_SIGNING_SECRET"), "SLACK_SIGNING_SECRET", default="") or ""
        ).strip()
        slack_app_token = (_first_env(_k("SLACK_APP_TOKEN"), "SLACK_APP_TOKEN", default="") or "").strip()

        store_uri = (_first_env(_k("STORE_URI"), "MONGODB_URI", default="") or "").strip()

        port_raw = _first_env(_k("PORT"), "PORT", default="") or ""
        try:
            port = int(port_raw) if port_raw.strip() else 10000
        except ValueError:
            port = 10000

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            slack_enabled=_env_bool(_k("SLACK_ENABLED"), True),
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), False),
            health_enabled=_env_bool(_k("HEALTH_ENABLED"), True),
            slack_bot_token=slack_bot_token,
            slack_signing_secret=slack_signing_secret,
            slack_app_token=slack_app_token,
            store_uri=store_uri,
            store_timeout_ms=max(1, _env_int(_k("STORE_TIMEOUT_MS"), 5000)),
            store_max_retries=max(1, _env_int(_k("STORE_MAX_RETRIES"), 3)),
            host=_env(_k("HOST"), "0.0.0.0"),
            port=port,
        )

    def missing_required(self) -> list[str]:
        """Names of required variables that are unset for the enabled connectors."""
        missing: list[str] = []
        if not self.store_uri:
            missing.append(_k("STORE_URI"))
        if self.slack_enabled:
            if not self.slack_bot_token:
                missing.append(_k("SLACK_BOT_TOKEN"))
            if not self.slack_signing_secret:
                missing.append(_k("SLACK_SIGNING_SECRET"))
            if not self.slack_app_token:
                missing.append(_k("SLACK_APP_TOKEN"))
        return missing


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
