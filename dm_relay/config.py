"""Configuration and shared state."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./dm_relay.db"

# Upper bound on the pause between bulk messages (milliseconds)
MAX_BULK_DELAY_MS = 10000


def _env_delay_ms(name: str, default: int) -> int:
    return max(0, min(_env_int(name, default), MAX_BULK_DELAY_MS))


CONFIG = {
    "host": os.getenv("HOST", "0.0.0.0"),
    "port": _env_int("PORT", 3000),
    "database_url": os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL,
    "db_echo": _env_bool("DB_ECHO", "false"),
    # Long-running reply listener; empty disables it
    "discord_bot_token": os.getenv("DISCORD_BOT_TOKEN", "").strip(),
    # Re-point the reply listener to each newly submitted token
    "listen_on_submit": _env_bool("LISTEN_ON_SUBMIT", "false"),
    "max_bulk_delay_ms": _env_delay_ms("MAX_BULK_DELAY_MS", MAX_BULK_DELAY_MS),
    "session_timeout_seconds": _env_int("SESSION_TIMEOUT_SECONDS", 30),
}

if CONFIG["discord_bot_token"] == "your_token_here":
    CONFIG["discord_bot_token"] = ""


# ── Typed config ──────────────────────────────────────


@dataclass
class DatabaseConfig:
    url: str = DEFAULT_DATABASE_URL
    echo: bool = False


@dataclass
class DiscordConfig:
    listener_token: str = ""
    listen_on_submit: bool = False
    session_timeout_seconds: int = 30


@dataclass
class AppConfig:
    """Typed configuration handed to create_app()."""

    host: str = "0.0.0.0"
    port: int = 3000
    max_bulk_delay_ms: int = MAX_BULK_DELAY_MS
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            host=CONFIG["host"],
            port=CONFIG["port"],
            max_bulk_delay_ms=CONFIG["max_bulk_delay_ms"],
            database=DatabaseConfig(
                url=CONFIG["database_url"],
                echo=CONFIG["db_echo"],
            ),
            discord=DiscordConfig(
                listener_token=CONFIG["discord_bot_token"],
                listen_on_submit=CONFIG["listen_on_submit"],
                session_timeout_seconds=CONFIG["session_timeout_seconds"],
            ),
        )
