"""Tests for validated environment variable access."""

from recallforge.core.env import (
    FAILURE_POLICIES,
    LOG_LEVELS,
    get_env_float,
    get_env_int,
    get_env_str,
    get_env_whitelist,
)


class TestGetEnvInt:
    def test_unset_returns_default(self):
        assert get_env_int("RF_TEST_INT", default=4) == 4

    def test_parses(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_INT", "12")
        assert get_env_int("RF_TEST_INT") == 12

    def test_clamps(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_INT", "500")
        assert get_env_int("RF_TEST_INT", min_value=0, max_value=100) == 100
        monkeypatch.setenv("RF_TEST_INT", "-3")
        assert get_env_int("RF_TEST_INT", min_value=0, max_value=100) == 0

    def test_invalid_returns_default(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_INT", "many")
        assert get_env_int("RF_TEST_INT", default=7) == 7


class TestGetEnvFloat:
    def test_parses(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_FLOAT", "0.85")
        assert get_env_float("RF_TEST_FLOAT", min_value=0.0, max_value=1.0) == 0.85

    def test_out_of_range_rejected(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_FLOAT", "1.5")
        assert get_env_float("RF_TEST_FLOAT", default=0.9, max_value=1.0) == 0.9

    def test_invalid_returns_default(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_FLOAT", "high")
        assert get_env_float("RF_TEST_FLOAT") is None


class TestGetEnvWhitelist:
    def test_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_LEVEL", " debug ")
        assert get_env_whitelist("RF_TEST_LEVEL", LOG_LEVELS) == "DEBUG"

    def test_case_sensitive(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_LEVEL", "debug")
        assert get_env_whitelist("RF_TEST_LEVEL", LOG_LEVELS, case_sensitive=True) is None

    def test_not_allowed(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_POLICY", "forget")
        assert get_env_whitelist("RF_TEST_POLICY", FAILURE_POLICIES, default="reset") == "reset"


class TestGetEnvStr:
    def test_strips(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_STR", "  decks ")
        assert get_env_str("RF_TEST_STR") == "decks"

    def test_blank_is_default(self, monkeypatch):
        monkeypatch.setenv("RF_TEST_STR", "   ")
        assert get_env_str("RF_TEST_STR", default="x") == "x"
