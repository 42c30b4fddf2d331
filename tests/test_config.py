"""Unit tests for environment-backed configuration."""

import pytest

from transcript_sync import config


class TestEnvNumber:
    """_env_number() accepts positive numbers and falls back otherwise."""

    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("TRANSCRIPT_TEST_VALUE", raising=False)
        assert config._env_number("TRANSCRIPT_TEST_VALUE", 250) == 250

    def test_valid_value(self, monkeypatch):
        monkeypatch.setenv("TRANSCRIPT_TEST_VALUE", " 100 ")
        assert config._env_number("TRANSCRIPT_TEST_VALUE", 250) == 100.0

    @pytest.mark.parametrize("raw", ["", "abc", "0", "-5"])
    def test_invalid_values_fall_back(self, monkeypatch, raw):
        monkeypatch.setenv("TRANSCRIPT_TEST_VALUE", raw)
        assert config._env_number("TRANSCRIPT_TEST_VALUE", 30.0) == 30.0


def test_defaults_are_positive():
    assert config.POLL_INTERVAL_MS > 0
    assert config.FETCH_TIMEOUT_S > 0
