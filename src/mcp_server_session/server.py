import json
import logging
import sys
from typing import Any

# FastMCP 2.0 import
from fastmcp import FastMCP

from .config import SessionSettings
from .session_file_handler import FileSessionHandler
from .session_store import SessionStore
from .sweeper import SessionSweeper

logger = logging.getLogger(__name__)
# Ensure logs are visible in the FastMCP subprocess even if no handlers configured
if not logger.handlers:
    _handler = logging.StreamHandler(sys.stdout)
    _handler.setLevel(logging.INFO)
    _formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    _handler.setFormatter(_formatter)
    logger.addHandler(_handler)
logger.setLevel(logging.INFO)

# Create FastMCP instance
mcp = FastMCP("Session Store 🗂️")


def _to_json(payload: Any) -> str:
    return json.dumps(payload, default=str, sort_keys=True)


class SessionRunner:
    """Runs every request as its own session cycle against one handler."""

    def __init__(
        self,
        handler: FileSessionHandler | None = None,
        settings: SessionSettings | None = None,
    ):
        self.settings = settings or SessionSettings.from_env()
        self._handler = handler

    @property
    def handler(self) -> FileSessionHandler:
        # Created on first use so importing the server does not touch the disk
        if self._handler is None:
            self._handler = self.settings.build_handler()
            logger.info(f"Session directory: {self._handler.sessions_dir}")
        return self._handler

    def open_cycle(self) -> SessionStore:
        return SessionStore(self.handler)

    def describe(self, store: SessionStore) -> dict[str, Any]:
        flash = store.flash_state
        return {
            "session_id": store.id,
            "revision": store.revision,
            "data": store.all(),
            "flash": {"new": flash.new, "old": flash.old},
            "token": store.token(),
        }

    def snapshot(self) -> str:
        return _to_json(self.describe(self.open_cycle()))

    def get(self, key: str, default: Any = None) -> str:
        store = self.open_cycle()
        return _to_json({"key": key, "value": store.get(key, default)})

    def put(self, key: str, value: Any) -> str:
        store = self.open_cycle()
        store.put(key, value)
        return _to_json(self.describe(store))

    def remove(self, key: str) -> str:
        store = self.open_cycle()
        store.remove(key)
        return _to_json(self.describe(store))

    def flash(self, key: str, value: Any) -> str:
        store = self.open_cycle()
        store.flash(key, value)
        return _to_json(self.describe(store))

    def now(self, key: str, value: Any) -> str:
        store = self.open_cycle()
        store.now(key, value)
        return _to_json(self.describe(store))

    def flash_input(self, input_data: dict[str, Any]) -> str:
        store = self.open_cycle()
        store.flash_input(input_data)
        return _to_json(self.describe(store))

    def old_input(self, key: str | None = None, default: Any = None) -> str:
        store = self.open_cycle()
        return _to_json({"key": key, "value": store.get_old_input(key, default)})

    def regenerate(self, destroy: bool = False) -> str:
        store = self.open_cycle()
        previous = store.id
        store.regenerate(destroy=destroy)
        return _to_json({"previous_id": previous, **self.describe(store)})

    def token(self) -> str:
        return self.open_cycle().token()

    def sweep(self, dry_run: bool = False) -> str:
        report = SessionSweeper(self.handler).run_once(dry_run=dry_run)
        return _to_json(
            {
                "deleted": report.deleted,
                "kept": report.kept,
                "lifetime_minutes": report.lifetime_minutes,
                "dry_run": report.dry_run,
            }
        )


# Global session runner instance
runner = SessionRunner()


# === TOOLS ===
@mcp.tool
def session_snapshot() -> str:
    """Start a session cycle and return the session id, data, flash state and token."""
    return runner.snapshot()


@mcp.tool
def session_get(key: str, default: Any = None) -> str:
    """Read a session value.

    Args:
        key: Session key
        default: Returned when the key is missing; without it a missing key is an error
    """
    return runner.get(key, default)


@mcp.tool
def session_put(key: str, value: Any) -> str:
    """Store a value in the session."""
    return runner.put(key, value)


@mcp.tool
def session_remove(key: str) -> str:
    """Remove a value from the session."""
    return runner.remove(key)


@mcp.tool
def session_flash(key: str, value: Any) -> str:
    """Store a value that stays visible during the next cycle, then expires."""
    return runner.flash(key, value)


@mcp.tool
def session_now(key: str, value: Any) -> str:
    """Store a value that expires at the start of the next cycle."""
    return runner.now(key, value)


@mcp.tool
def session_flash_input(input_data: dict[str, Any]) -> str:
    """Flash submitted input so the next cycle can refill a form."""
    return runner.flash_input(input_data)


@mcp.tool
def session_old_input(key: str | None = None, default: Any = None) -> str:
    """Read flashed input; dotted keys reach into nested values."""
    return runner.old_input(key, default)


@mcp.tool
def session_regenerate(destroy: bool = False) -> str:
    """Move the session to a new id, keeping its contents.

    Args:
        destroy: Delete the file of the previous id
    """
    return runner.regenerate(destroy)


@mcp.tool
def session_token() -> str:
    """Return the CSRF token of the current session."""
    return runner.token()


@mcp.tool
def sweep_sessions(dry_run: bool = False) -> str:
    """Delete expired session files and report what was removed."""
    return runner.sweep(dry_run)


# === RESOURCES ===
@mcp.resource("session://current")
def current_session() -> str:
    """The current session as JSON."""
    return runner.snapshot()


# === MAIN ENTRY POINT ===
def main():
    """Main entry point for the FastMCP 2.0 server."""
    logger.info("Starting FastMCP 2.0 session store server")
    sweeper = SessionSweeper(
        runner.handler, interval_seconds=runner.settings.sweep_interval_seconds
    )
    sweeper.start()
    try:
        mcp.run()
    finally:
        sweeper.stop()
        runner.handler.close()


if __name__ == "__main__":
    main()
