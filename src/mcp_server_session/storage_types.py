"""
Storage Types and Data Classes

This module contains the core data structures used by the session handler
and the session store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic, TypeVar, Union

TOKEN_KEY = "_token"
FLASH_NEW_KEY = "_flash.new"
FLASH_OLD_KEY = "_flash.old"
OLD_INPUT_KEY = "_old_input"

# Keys that carry control state and are never part of the user mapping
RESERVED_KEYS = frozenset({TOKEN_KEY, FLASH_NEW_KEY, FLASH_OLD_KEY})

# Marker stored in every payload written by this package
PAYLOAD_MARKER = "__session__"
PAYLOAD_VERSION = 1

T = TypeVar("T")


@dataclass(frozen=True)
class SessionFile:
    """A session file found in the sessions directory."""

    name: str
    fullpath: Path
    last_modified: float


@dataclass
class FlashState:
    """Keys flashed during the current cycle (new) and the previous one (old)."""

    new: list[str] = field(default_factory=list)
    old: list[str] = field(default_factory=list)

    def copy(self) -> FlashState:
        return FlashState(new=list(self.new), old=list(self.old))


@dataclass
class SessionRecord:
    """
    The persisted unit of a session.

    User data, flash state and the CSRF token are kept as separate fields and
    serialized together. ``revision`` is the revision of the file the record
    was read from (0 for a record that was never written).
    """

    data: dict[str, Any] = field(default_factory=dict)
    flash: FlashState = field(default_factory=FlashState)
    token: str = ""
    revision: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            PAYLOAD_MARKER: PAYLOAD_VERSION,
            "data": self.data,
            "flash": {"new": list(self.flash.new), "old": list(self.flash.old)},
            "token": self.token,
            "revision": self.revision,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SessionRecord:
        """Build a record from a decoded payload.

        Plain mappings without the payload marker are treated as legacy flat
        sessions where the token and flash lists live among the user keys.
        """
        if PAYLOAD_MARKER in payload:
            flash = payload.get("flash") or {}
            return cls(
                data=dict(payload["data"]),
                flash=FlashState(
                    new=list(flash.get("new", [])), old=list(flash.get("old", []))
                ),
                token=str(payload.get("token") or ""),
                revision=int(payload.get("revision", 0)),
            )

        return cls.from_mapping(payload)

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> SessionRecord:
        """Lift reserved keys out of a flat mapping into record fields."""
        data = dict(mapping)
        token = data.pop(TOKEN_KEY, None) or ""
        flash = FlashState(
            new=list(data.pop(FLASH_NEW_KEY, None) or []),
            old=list(data.pop(FLASH_OLD_KEY, None) or []),
        )
        return cls(data=data, flash=flash, token=str(token), revision=0)


@dataclass(frozen=True)
class Found(Generic[T]):
    """Lookup result for a key that is present."""

    value: T


@dataclass(frozen=True)
class Missing:
    """Lookup result for a key that is absent."""

    key: str


LookupResult = Union[Found[Any], Missing]


@dataclass
class SweepReport:
    """Outcome of one expired-session sweep."""

    deleted: list[str]
    kept: list[str]
    lifetime_minutes: int
    dry_run: bool = False
