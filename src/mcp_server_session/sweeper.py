"""
Expired Session Sweeper

Session files are never removed on the read path; the sweeper deletes the
ones that fell out of the lifetime window, either on demand (run_once) or
from a background thread every ``interval_seconds``.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .base_session_handler import SessionHandler
from .storage_types import SweepReport
from .system_utils import log_storage_status

logger = logging.getLogger(__name__)


class SessionSweeper:
    """Periodically deletes expired session files."""

    def __init__(
        self, handler: SessionHandler, interval_seconds: float = 300.0
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._handler = handler
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self, dry_run: bool = False) -> SweepReport:
        with self._lock:
            report = self._handler.sweep_expired(dry_run=dry_run)

        sessions_dir = getattr(self._handler, "sessions_dir", None)
        if sessions_dir is not None:
            log_storage_status(sessions_dir, session_count=len(report.kept))
        return report

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="session-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(f"Session sweeper started (every {self._interval_seconds}s)")

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("Session sweeper stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            try:
                self.run_once()
            except Exception as exc:
                # Keep sweeping on the next interval
                logger.exception(f"Session sweep failed: {exc}")
