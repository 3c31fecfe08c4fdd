"""
File-based Session Handler Implementation

Stores one pickled session record per file, named ``<session id>.session``,
inside a sessions directory.

Key points:
- The current session is the most recently modified file within the lifetime
  window; expired files are only removed by ``sweep_expired``
- Writes go to a temporary file which then replaces the session file
- Every file carries a revision; a write whose record was loaded from an
  older revision is rejected with StaleSessionError
- The revision check and the replace run under a per-session diskcache lock,
  which also holds across processes sharing the directory
"""

from __future__ import annotations

import dataclasses
import logging
import os
import pickle
import time
from pathlib import Path
from typing import Any, Optional

import diskcache

from .base_session_handler import SessionHandler
from .errors import CorruptSessionError, PersistenceError, StaleSessionError
from .storage_types import SessionFile, SessionRecord, SweepReport
from .utils.session_utils import is_session_id, validate_session_id

logger = logging.getLogger(__name__)

DEFAULT_SESSIONS_DIR = "storage/sessions"
DEFAULT_LIFETIME_MINUTES = 60
SESSION_SUFFIX = ".session"


class FileSessionHandler(SessionHandler):
    """
    Filesystem-based SessionHandler.

    Each session lives in its own file; locks live in a diskcache directory
    next to the session files.
    """

    def __init__(
        self,
        sessions_dir: str | Path = DEFAULT_SESSIONS_DIR,
        lifetime_minutes: int = DEFAULT_LIFETIME_MINUTES,
        lock_expire_seconds: float = 10.0,
    ) -> None:
        """
        Initialize FileSessionHandler.

        Args:
            sessions_dir: Directory holding the session files
            lifetime_minutes: How long after its last write a file stays current
            lock_expire_seconds: Lifetime of a lock left behind by a crashed writer
        """
        if lifetime_minutes <= 0:
            raise ValueError("lifetime_minutes must be positive")

        self._sessions_dir = Path(sessions_dir)
        self._sessions_dir.mkdir(parents=True, exist_ok=True)
        self._lifetime_minutes = lifetime_minutes
        self._lock_expire_seconds = lock_expire_seconds

        self._lock_cache = diskcache.Cache(
            directory=str(self._sessions_dir / ".locks")
        )

    @property
    def sessions_dir(self) -> Path:
        return self._sessions_dir

    @property
    def lifetime_minutes(self) -> int:
        return self._lifetime_minutes

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - automatic cleanup."""
        self.close()

    def close(self) -> None:
        """Close the lock cache."""
        if hasattr(self, "_lock_cache"):
            self._lock_cache.close()

    # Internal helpers
    def _now(self) -> float:
        return time.time()

    def _cutoff(self) -> float:
        return self._now() - self._lifetime_minutes * 60

    def _path(self, session_id: str) -> Path:
        return self._sessions_dir / f"{session_id}{SESSION_SUFFIX}"

    def _lock(self, session_id: str) -> diskcache.Lock:
        return diskcache.Lock(
            self._lock_cache, f"lock:{session_id}", expire=self._lock_expire_seconds
        )

    def _serialize_data(self, record: SessionRecord) -> bytes:
        return pickle.dumps(record.to_payload(), protocol=pickle.HIGHEST_PROTOCOL)

    def _deserialize_data(self, data_bytes: bytes, path: Path) -> SessionRecord:
        try:
            payload: Any = pickle.loads(data_bytes)
        except Exception as exc:
            raise CorruptSessionError(
                f"Cannot decode session file {path}: {exc}"
            ) from exc

        if not isinstance(payload, dict):
            raise CorruptSessionError(
                f"Session file {path} holds {type(payload).__name__}, "
                "expected a mapping"
            )
        try:
            return SessionRecord.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptSessionError(
                f"Malformed session file {path}: {exc}"
            ) from exc

    def _load(self, path: Path) -> SessionRecord:
        try:
            data_bytes = path.read_bytes()
        except OSError as exc:
            raise CorruptSessionError(
                f"Cannot read session file {path}: {exc}"
            ) from exc
        return self._deserialize_data(data_bytes, path)

    def _disk_revision(self, path: Path) -> int:
        if not path.exists():
            return 0
        return self._load(path).revision

    def _unlink_if_expired(self, file: SessionFile, cutoff: float) -> bool:
        """Delete a listed file unless a write touched it after the listing."""
        with self._lock(file.name):
            try:
                mtime = file.fullpath.stat().st_mtime
            except FileNotFoundError:
                return True
            if mtime > cutoff:
                return False
            file.fullpath.unlink(missing_ok=True)
        return True

    # SessionHandler interface
    def list_session_files(self) -> list[SessionFile]:
        files = []
        for path in self._sessions_dir.glob(f"*{SESSION_SUFFIX}"):
            if not is_session_id(path.stem):
                continue
            try:
                mtime = path.stat().st_mtime
            except FileNotFoundError:
                # Removed between listing and stat
                continue
            files.append(
                SessionFile(name=path.stem, fullpath=path, last_modified=mtime)
            )
        return files

    def last_session_file(self) -> Optional[SessionFile]:
        cutoff = self._cutoff()
        current = [f for f in self.list_session_files() if f.last_modified > cutoff]
        if not current:
            return None

        current.sort(key=lambda f: (f.last_modified, f.name), reverse=True)
        return current[0]

    def read(self, file: SessionFile) -> SessionRecord:
        return self._load(file.fullpath)

    def write(self, session_id: str, record: SessionRecord) -> int:
        session_id = validate_session_id(session_id)
        path = self._path(session_id)

        with self._lock(session_id):
            found = self._disk_revision(path)
            if found != record.revision:
                raise StaleSessionError(session_id, record.revision, found)

            revision = found + 1
            stored = dataclasses.replace(record, revision=revision)
            data_bytes = self._serialize_data(stored)

            tmp_path = path.with_suffix(".tmp")
            try:
                tmp_path.write_bytes(data_bytes)
                os.replace(tmp_path, path)
            except OSError as exc:
                tmp_path.unlink(missing_ok=True)
                raise PersistenceError(
                    f"Cannot write session file {path}: {exc}"
                ) from exc

        logger.debug("Wrote session %s at revision %d", session_id, revision)
        return revision

    def delete(self, session_id: str) -> bool:
        session_id = validate_session_id(session_id)
        path = self._path(session_id)

        with self._lock(session_id):
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                raise PersistenceError(
                    f"Cannot delete session file {path}: {exc}"
                ) from exc

        logger.debug("Deleted session %s", session_id)
        return True

    def sweep_expired(self, dry_run: bool = False) -> SweepReport:
        cutoff = self._cutoff()
        deleted: list[str] = []
        kept: list[str] = []

        for file in self.list_session_files():
            if file.last_modified > cutoff:
                kept.append(file.name)
                continue

            if not dry_run:
                try:
                    removed = self._unlink_if_expired(file, cutoff)
                except OSError as exc:
                    logger.warning(f"Sweep failed for {file.fullpath}: {exc}")
                    kept.append(file.name)
                    continue
                if not removed:
                    # Rewritten since it was listed
                    kept.append(file.name)
                    continue
            deleted.append(file.name)

        logger.info(
            f"Sweep: deleted={len(deleted)}, kept={len(kept)}, dry_run={dry_run}"
        )
        return SweepReport(
            deleted=deleted,
            kept=kept,
            lifetime_minutes=self._lifetime_minutes,
            dry_run=dry_run,
        )
