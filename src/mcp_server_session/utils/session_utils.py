from __future__ import annotations

from ..storage_types import RESERVED_KEYS
from .random_utils import ALPHABET, DEFAULT_LENGTH

_ALLOWED = frozenset(ALPHABET)


def is_session_id(value: str) -> bool:
    return len(value) == DEFAULT_LENGTH and set(value) <= _ALLOWED


def validate_session_id(session_id: str | None) -> str:
    """Validate that session_id looks like a generated id and return it.

    Ids become file names, so anything outside the generated alphabet or of
    the wrong length is rejected.
    """
    if session_id is None:
        raise ValueError("session_id is required")
    if not isinstance(session_id, str):
        raise ValueError("session_id must be a string")
    cleaned = session_id.strip()
    if not is_session_id(cleaned):
        raise ValueError(
            f"session_id must be {DEFAULT_LENGTH} alphanumeric characters"
        )
    return cleaned


def validate_key(key: str) -> str:
    """Reject keys that would clash with the session's control state."""
    if not isinstance(key, str):
        raise ValueError("session keys must be strings")
    if key in RESERVED_KEYS:
        raise ValueError(f"'{key}' is a reserved session key")
    return key
