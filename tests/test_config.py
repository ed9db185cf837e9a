"""Tests for the config module."""

import pytest

from grocery_prices import config
from grocery_prices.config import ensure_config_dir, get_api_key, mask_api_key


@pytest.fixture
def temp_config_dir(tmp_path, monkeypatch):
    """Point the config directory at a temporary location."""
    config_dir = tmp_path / ".grocery-prices"
    monkeypatch.setattr("grocery_prices.config.CONFIG_DIR", config_dir)
    return config_dir


# ============================================================================
# API Key Tests
# ============================================================================


class TestGetApiKey:
    """Tests for get_api_key function."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SPOONACULAR_API_KEY", "abc123def456")
        assert get_api_key() == "abc123def456"

    def test_strips_whitespace(self, monkeypatch):
        monkeypatch.setenv("SPOONACULAR_API_KEY", "  abc123def456\n")
        assert get_api_key() == "abc123def456"

    def test_missing(self, monkeypatch):
        monkeypatch.delenv("SPOONACULAR_API_KEY", raising=False)
        assert get_api_key() is None

    def test_blank_is_missing(self, monkeypatch):
        monkeypatch.setenv("SPOONACULAR_API_KEY", "   ")
        assert get_api_key() is None


class TestMaskApiKey:
    """Tests for mask_api_key function."""

    def test_long_key(self):
        assert mask_api_key("abcdef1234567890") == "abcde...7890"

    def test_short_key_fully_masked(self):
        assert mask_api_key("short") == "*****"

    def test_no_key(self):
        assert mask_api_key(None) == "<none>"
        assert mask_api_key("") == "<none>"


# ============================================================================
# Config Directory Tests
# ============================================================================


class TestConfigDir:
    """Tests for config directory handling."""

    def test_ensure_creates_directory(self, temp_config_dir):
        assert not temp_config_dir.exists()

        result = ensure_config_dir()

        assert result == temp_config_dir
        assert temp_config_dir.is_dir()

    def test_ensure_is_idempotent(self, temp_config_dir):
        ensure_config_dir()
        ensure_config_dir()
        assert temp_config_dir.is_dir()

    def test_cache_files_live_in_config_dir(self):
        assert config.PACKAGE_CACHE_FILE.parent == config.CONFIG_DIR
        assert config.PRICE_CACHE_FILE.parent == config.CONFIG_DIR

    def test_cache_lifetimes(self):
        assert config.PACKAGE_CACHE_TTL.days == 30
        assert config.PRICE_CACHE_TTL.total_seconds() == 24 * 60 * 60
