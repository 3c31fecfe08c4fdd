"""Unit tests for SessionRunner class."""

import json

import pytest

from mcp_server_session.config import SessionSettings
from mcp_server_session.errors import KeyNotFoundError
from mcp_server_session.server import SessionRunner


@pytest.fixture
def runner(handler, temp_dir):
    """Create a SessionRunner bound to the temporary handler."""
    return SessionRunner(handler=handler, settings=SessionSettings(sessions_dir=temp_dir))


class TestSessionRunner:
    """Test cases for SessionRunner class."""

    def test_handler_is_created_lazily(self, temp_dir):
        """Test that the handler is only built on first use."""
        runner = SessionRunner(settings=SessionSettings(sessions_dir=temp_dir))
        assert runner._handler is None

        handler = runner.handler
        try:
            assert runner.handler is handler
            assert str(handler.sessions_dir) == temp_dir
        finally:
            handler.close()

    def test_snapshot(self, runner):
        snapshot = json.loads(runner.snapshot())

        assert len(snapshot["session_id"]) == 40
        assert len(snapshot["token"]) == 40
        assert snapshot["data"] == {}
        assert snapshot["flash"] == {"new": [], "old": []}

    def test_put_then_get(self, runner):
        runner.put("user", {"name": "alice"})

        result = json.loads(runner.get("user"))

        assert result == {"key": "user", "value": {"name": "alice"}}

    def test_get_missing_key(self, runner):
        with pytest.raises(KeyNotFoundError):
            runner.get("missing")
        assert json.loads(runner.get("missing", "fallback"))["value"] == "fallback"

    def test_remove(self, runner):
        runner.put("user", "alice")

        snapshot = json.loads(runner.remove("user"))

        assert snapshot["data"] == {}

    def test_each_call_is_a_cycle(self, runner):
        """Test that flashed values age by one cycle per call."""
        flashed = json.loads(runner.flash("msg", "hi"))
        assert flashed["flash"]["new"] == ["msg"]

        assert json.loads(runner.snapshot())["data"] == {"msg": "hi"}
        assert json.loads(runner.snapshot())["data"] == {}

    def test_now(self, runner):
        current = json.loads(runner.now("status", "saved"))
        assert current["data"] == {"status": "saved"}

        assert json.loads(runner.snapshot())["data"] == {}

    def test_flash_input_and_old_input(self, runner):
        runner.flash_input({"email": "a@example.com"})

        result = json.loads(runner.old_input("email"))

        assert result["value"] == "a@example.com"

    def test_regenerate(self, runner, handler):
        before = json.loads(runner.put("user", "alice"))

        result = json.loads(runner.regenerate(destroy=True))

        assert result["previous_id"] == before["session_id"]
        assert result["session_id"] != before["session_id"]
        assert result["data"] == {"user": "alice"}
        assert result["token"] == before["token"]
        assert [f.name for f in handler.list_session_files()] == [result["session_id"]]

    def test_token(self, runner):
        snapshot = json.loads(runner.snapshot())
        assert runner.token() == snapshot["token"]

    def test_sweep(self, runner):
        runner.snapshot()

        report = json.loads(runner.sweep(dry_run=True))

        assert report["deleted"] == []
        assert len(report["kept"]) == 1
        assert report["lifetime_minutes"] == 60
        assert report["dry_run"] is True
