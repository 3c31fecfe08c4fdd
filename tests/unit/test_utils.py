"""Unit tests for the random string and validation helpers."""

import pytest

from mcp_server_session.utils.random_utils import ALPHABET, random_string
from mcp_server_session.utils.session_utils import (
    is_session_id,
    validate_key,
    validate_session_id,
)


class TestRandomString:
    def test_default_length(self):
        value = random_string()
        assert len(value) == 40
        assert set(value) <= set(ALPHABET)

    def test_custom_length(self):
        assert len(random_string(12)) == 12

    def test_values_differ(self):
        assert len({random_string() for _ in range(50)}) == 50

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            random_string(0)


class TestValidateSessionId:
    def test_valid_id(self):
        session_id = random_string()
        assert validate_session_id(session_id) == session_id
        assert validate_session_id(f"  {session_id}\n") == session_id

    def test_none(self):
        with pytest.raises(ValueError, match="session_id is required"):
            validate_session_id(None)

    def test_not_a_string(self):
        with pytest.raises(ValueError, match="must be a string"):
            validate_session_id(42)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "value",
        ["", "short", "a" * 39, "a" * 41, "../" + "a" * 37, "a" * 39 + "/"],
    )
    def test_rejected_values(self, value):
        with pytest.raises(ValueError, match="40 alphanumeric characters"):
            validate_session_id(value)

    def test_is_session_id(self):
        assert is_session_id(random_string())
        assert not is_session_id("bogus")


class TestValidateKey:
    def test_plain_key(self):
        assert validate_key("user") == "user"
        assert validate_key("_old_input") == "_old_input"

    @pytest.mark.parametrize("key", ["_token", "_flash.new", "_flash.old"])
    def test_reserved_key(self, key):
        with pytest.raises(ValueError, match="reserved"):
            validate_key(key)

    def test_non_string_key(self):
        with pytest.raises(ValueError):
            validate_key(1)  # type: ignore[arg-type]
