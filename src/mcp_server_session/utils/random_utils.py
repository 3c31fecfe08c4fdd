from __future__ import annotations

import secrets
import string

ALPHABET = string.ascii_letters + string.digits
DEFAULT_LENGTH = 40


def random_string(length: int = DEFAULT_LENGTH) -> str:
    """Return a random alphanumeric string, used for session ids and CSRF tokens."""
    if length <= 0:
        raise ValueError("length must be a positive integer")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
