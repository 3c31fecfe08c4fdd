"""
Session Store

Owns the data of one session for one request cycle. On start it picks the
current session file through the handler (or creates a new session), then
ages the flash keys by one cycle. Every mutation is written back through the
handler straight away.

Flash protocol:
- ``flash(key, value)`` keeps a value for the current and the next cycle,
  also when the key was already due for purging
- ``now(key, value)`` keeps a value for the current cycle only
- flashed values live in the user mapping; the flash state only lists keys
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping, Optional

from .base_session_handler import SessionHandler
from .errors import CorruptSessionError, KeyNotFoundError
from .storage_types import (
    OLD_INPUT_KEY,
    FlashState,
    Found,
    LookupResult,
    Missing,
    SessionRecord,
)
from .utils.random_utils import random_string
from .utils.session_utils import validate_key

logger = logging.getLogger(__name__)

_UNSET = object()


class SessionStore:
    """One session, loaded for one cycle."""

    def __init__(self, handler: SessionHandler, autostart: bool = True) -> None:
        """
        Create a store bound to a handler.

        Args:
            handler: Persistence backend for session records
            autostart: Run start() right away
        """
        self._handler = handler
        self._id: Optional[str] = None
        self._record = SessionRecord()
        if autostart:
            self.start()

    @property
    def id(self) -> Optional[str]:
        return self._id

    @property
    def revision(self) -> int:
        return self._record.revision

    @property
    def flash_state(self) -> FlashState:
        return self._record.flash.copy()

    def start(self) -> None:
        """Load the current session (or initialize one) and tick the flash keys."""
        file = self._handler.last_session_file()
        if file is None:
            logger.info("No current session file, starting a new session")
            self.initialize()
            return

        try:
            record = self._handler.read(file)
        except CorruptSessionError as exc:
            logger.warning(f"Discarding unreadable session {file.name}: {exc}")
            self.initialize()
            return

        self._id = file.name
        self._record = record
        if not self._record.token:
            self._record.token = random_string()
        self.tick_flash()

    def initialize(self, seed: Optional[Mapping[str, Any]] = None) -> None:
        """
        Start a new session with a fresh id.

        Args:
            seed: Initial data. A ``_token`` entry is kept as the CSRF token,
                ``_flash.new``/``_flash.old`` entries become the flash state.
        """
        record = SessionRecord.from_mapping(dict(seed or {}))
        if not record.token:
            record.token = random_string()

        self._commit(record, session_id=random_string())
        logger.info(f"Initialized session {self._id}")

    def has(self, key: str) -> bool:
        return key in self._record.data

    def all(self) -> dict[str, Any]:
        """Return a snapshot of the user data."""
        return dict(self._record.data)

    def lookup(self, key: str) -> LookupResult:
        if key in self._record.data:
            return Found(self._record.data[key])
        return Missing(key)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a value, falling back to a default.

        Raises:
            KeyNotFoundError: If the key is missing and default is None
        """
        result = self.lookup(key)
        if isinstance(result, Found):
            return result.value
        if default is not None:
            return default
        raise KeyNotFoundError(key)

    def put(self, key: str, value: Any) -> None:
        record = self._staged()
        record.data[validate_key(key)] = value
        self._commit(record)

    def remove(self, key: str) -> None:
        # Persisted even when the key was absent
        record = self._staged()
        record.data.pop(validate_key(key), None)
        self._commit(record)

    def flush(self) -> None:
        """Empty the user data and flash state in memory. Call save() to persist."""
        self._record.data.clear()
        self._record.flash = FlashState()

    def save(self) -> None:
        self._commit(self._record)

    def flash(self, key: str, value: Any = _UNSET) -> Any:
        """
        Store a value for this cycle and the next one.

        Called without a value it reads instead: the value of ``key`` if the
        key was flashed during this cycle, else None.
        """
        key = validate_key(key)
        if value is _UNSET:
            return self._flashed_value(key, self._record.flash.new)

        record = self._staged()
        # A re-flashed key must not be purged by the next tick
        if key in record.flash.old:
            record.flash.old.remove(key)
        if key not in record.flash.new:
            record.flash.new.append(key)
        record.data[key] = value
        self._commit(record)
        return None

    def now(self, key: str, value: Any = _UNSET) -> Any:
        """
        Store a value that is purged at the start of the next cycle.

        Called without a value it returns the value of ``key`` if the key is
        due for purging at the next tick, else None.
        """
        key = validate_key(key)
        if value is _UNSET:
            return self._flashed_value(key, self._record.flash.old)

        record = self._staged()
        if key not in record.flash.old:
            record.flash.old.append(key)
        record.data[key] = value
        self._commit(record)
        return None

    old = now

    def flash_input(self, input_data: Mapping[str, Any]) -> None:
        self.flash(OLD_INPUT_KEY, dict(input_data))

    def get_old_input(self, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Read a value from the flashed input.

        ``key`` may use dots to reach into nested mappings ("user.email").
        A literal key that contains dots wins over the nested path.
        Without a key the whole input mapping is returned.
        """
        old_input = self._record.data.get(OLD_INPUT_KEY)
        if not old_input:
            return default
        if key is None:
            return old_input
        if key in old_input:
            return old_input[key]

        value: Any = old_input
        for part in key.split("."):
            if not isinstance(value, Mapping) or part not in value:
                return default
            value = value[part]
        return value

    def regenerate(self, destroy: bool = False) -> None:
        """
        Move the session to a new id, keeping data, flash state and token.

        Args:
            destroy: Also delete the file of the previous id
        """
        previous = self._id
        record = self._staged()
        record.revision = 0
        self._commit(record, session_id=random_string())
        logger.info(f"Regenerated session {previous} as {self._id}")

        if destroy and previous is not None:
            self._handler.delete(previous)

    def token(self) -> str:
        return self._record.token

    def tick_flash(self) -> None:
        """Purge the keys flashed for the previous cycle and age this cycle's keys."""
        record = self._staged()
        for key in record.flash.old:
            record.data.pop(key, None)

        record.flash = FlashState(new=[], old=list(record.flash.new))
        self._commit(record)

    def _flashed_value(self, key: str, keys: list[str]) -> Any:
        if key not in keys:
            return None
        return self._record.data.get(key)

    def _staged(self) -> SessionRecord:
        return dataclasses.replace(
            self._record,
            data=dict(self._record.data),
            flash=self._record.flash.copy(),
        )

    def _commit(
        self, record: SessionRecord, session_id: Optional[str] = None
    ) -> None:
        """Write a record and adopt it only once the write succeeded."""
        session_id = session_id or self._id
        if session_id is None:
            raise RuntimeError("Session has not been started")
        record.revision = self._handler.write(session_id, record)
        self._id = session_id
        self._record = record
