import sys
import psutil
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def log_storage_status(
    sessions_dir: str | Path, session_count: int | None = None
) -> None:
    """Log disk usage of the volume holding the session files."""
    try:
        du = psutil.disk_usage(str(sessions_dir))

        msg = (
            f"SessionDir={sessions_dir} | "
            f"Disk used={du.percent:.1f}% "
            f"({du.used // (1024**3)}GB/{du.total // (1024**3)}GB)"
            + (f" | Sessions={session_count}" if session_count is not None else "")
        )
        logger.info(msg)
        print(f"[MCP-Session] {msg}", file=sys.stderr, flush=True)
    except Exception as exc:
        logger.debug(f"Failed to log storage status: {exc}")
