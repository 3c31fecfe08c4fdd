"""
Unit tests for System Utils

Tests the storage status logging.
"""

from unittest.mock import patch

from mcp_server_session.system_utils import log_storage_status


class TestSystemUtils:
    """Test suite for system utilities."""

    def test_log_storage_status(self):
        """Test storage status logging with a session count."""
        with (
            patch("psutil.disk_usage") as mock_du,
            patch("mcp_server_session.system_utils.logger") as mock_logger,
        ):
            mock_du.return_value.percent = 60.0
            mock_du.return_value.used = 100 * 1024**3  # 100GB
            mock_du.return_value.total = 500 * 1024**3  # 500GB

            log_storage_status("/tmp/sessions", session_count=3)

            mock_du.assert_called_once_with("/tmp/sessions")
            mock_logger.info.assert_called_once()
            log_message = mock_logger.info.call_args[0][0]
            assert "SessionDir=/tmp/sessions" in log_message
            assert "Disk used=60.0%" in log_message
            assert "(100GB/500GB)" in log_message
            assert "Sessions=3" in log_message

    def test_log_storage_status_without_count(self):
        with (
            patch("psutil.disk_usage") as mock_du,
            patch("mcp_server_session.system_utils.logger") as mock_logger,
        ):
            mock_du.return_value.percent = 10.0
            mock_du.return_value.used = 1024**3
            mock_du.return_value.total = 10 * 1024**3

            log_storage_status("/tmp/sessions")

            log_message = mock_logger.info.call_args[0][0]
            assert "Sessions=" not in log_message

    def test_log_storage_status_failure(self):
        """Test that psutil failures are logged at debug level, not raised."""
        with (
            patch("psutil.disk_usage", side_effect=OSError("no such volume")),
            patch("mcp_server_session.system_utils.logger") as mock_logger,
        ):
            log_storage_status("/missing")

            mock_logger.info.assert_not_called()
            mock_logger.debug.assert_called_once()
