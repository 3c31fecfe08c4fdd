"""
Abstract Session Handler

This module contains the abstract base class that defines the interface
for all session persistence implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .storage_types import SessionFile, SessionRecord, SweepReport


class SessionHandler(ABC):
    """
    Abstract base class for session persistence.

    The SessionStore uses this interface to find, load and save session
    records without knowing the underlying storage mechanism.

    The interface is designed to support:
    - Discovery of the current session among many candidates
    - Whole-record reads and writes keyed by session id
    - Revision checks so concurrent cycles cannot silently overwrite each other
    - Sweeping of expired sessions
    """

    @abstractmethod
    def list_session_files(self) -> list[SessionFile]:
        """
        List every session file, expired or not.

        Returns:
            List of SessionFile entries in no particular order
        """
        pass

    @abstractmethod
    def last_session_file(self) -> Optional[SessionFile]:
        """
        Get the most recently modified session file within the lifetime window.

        Returns:
            The current SessionFile, or None if every file has expired
        """
        pass

    @abstractmethod
    def read(self, file: SessionFile) -> SessionRecord:
        """
        Decode a session file.

        Args:
            file: The session file to read

        Returns:
            The decoded SessionRecord, carrying the file's revision

        Raises:
            CorruptSessionError: If the content cannot be decoded
        """
        pass

    @abstractmethod
    def write(self, session_id: str, record: SessionRecord) -> int:
        """
        Persist a record under a session id.

        Args:
            session_id: The session identifier
            record: The record to store; its revision must match the file's

        Returns:
            The revision now stored on disk

        Raises:
            StaleSessionError: If the file was written by someone else meanwhile
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """
        Remove the file of a session.

        Args:
            session_id: The session identifier

        Returns:
            True if a file was removed, False if none existed
        """
        pass

    @abstractmethod
    def sweep_expired(self, dry_run: bool = False) -> SweepReport:
        """
        Delete every session file outside the lifetime window.

        Args:
            dry_run: Only report what would be deleted

        Returns:
            SweepReport listing deleted and kept session ids
        """
        pass
