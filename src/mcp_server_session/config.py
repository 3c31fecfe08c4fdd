"""
Session Settings

Settings are read from ``MCP_SESSION_*`` environment variables; unset or
unparsable values fall back to the defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .session_file_handler import (
    DEFAULT_LIFETIME_MINUTES,
    DEFAULT_SESSIONS_DIR,
    FileSessionHandler,
)


def _env_number(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class SessionSettings:
    sessions_dir: str = DEFAULT_SESSIONS_DIR
    lifetime_minutes: int = DEFAULT_LIFETIME_MINUTES
    sweep_interval_seconds: float = 300.0
    lock_expire_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> SessionSettings:
        return cls(
            sessions_dir=os.environ.get("MCP_SESSION_DIR") or DEFAULT_SESSIONS_DIR,
            lifetime_minutes=max(
                1,
                int(
                    _env_number(
                        "MCP_SESSION_LIFETIME_MINUTES", DEFAULT_LIFETIME_MINUTES
                    )
                ),
            ),
            sweep_interval_seconds=_env_number("MCP_SESSION_SWEEP_INTERVAL", 300.0),
            lock_expire_seconds=_env_number("MCP_SESSION_LOCK_EXPIRE", 10.0),
        )

    def build_handler(self) -> FileSessionHandler:
        return FileSessionHandler(
            sessions_dir=self.sessions_dir,
            lifetime_minutes=self.lifetime_minutes,
            lock_expire_seconds=self.lock_expire_seconds,
        )
