"""Shared pytest fixtures for session store tests."""

import shutil
import tempfile

import pytest

from mcp_server_session.session_file_handler import FileSessionHandler


@pytest.fixture
def temp_dir():
    """Create a temporary sessions directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def handler(temp_dir):
    """Create a FileSessionHandler writing into the temporary directory."""
    handler = FileSessionHandler(sessions_dir=temp_dir, lifetime_minutes=60)
    yield handler
    # Ensure cleanup
    handler.close()
