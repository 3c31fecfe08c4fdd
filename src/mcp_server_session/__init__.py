from . import server
from importlib.metadata import version, PackageNotFoundError

from .errors import (
    CorruptSessionError,
    KeyNotFoundError,
    PersistenceError,
    SessionError,
    StaleSessionError,
)
from .session_file_handler import FileSessionHandler
from .session_store import SessionStore


def main():
    """Main entry point for the package."""
    server.main()


# Package metadata helpers
try:
    __version__ = version("mcp-server-session")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0+dev"

# Server identity (keep in sync with server title)
SERVER_NAME = "Session Store 🗂️"

# Public API
__all__ = [
    "main",
    "server",
    "__version__",
    "SERVER_NAME",
    "SessionStore",
    "FileSessionHandler",
    "SessionError",
    "KeyNotFoundError",
    "CorruptSessionError",
    "PersistenceError",
    "StaleSessionError",
]
