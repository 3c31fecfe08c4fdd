"""
Session Errors

Exception hierarchy raised by the session handler and the session store.
"""


class SessionError(Exception):
    """Base class for all session store errors."""


class KeyNotFoundError(SessionError, LookupError):
    """Raised when a key is missing from the session and no default was given."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Key {key} not found in the session storage")
        self.key = key


class CorruptSessionError(SessionError):
    """Raised when a session file cannot be decoded into a session record."""


class PersistenceError(SessionError):
    """Raised when a session file cannot be written or removed."""


class StaleSessionError(PersistenceError):
    """Raised when the file on disk moved on since the record was loaded."""

    def __init__(self, session_id: str, expected: int, found: int) -> None:
        super().__init__(
            f"Session {session_id} is at revision {found}, expected {expected}"
        )
        self.session_id = session_id
        self.expected = expected
        self.found = found
