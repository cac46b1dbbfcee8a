"""Unit tests for config.py - Configuration management."""

import os
import pytest
from unittest.mock import patch

import config
from config import (
    DEFAULT_ENDPOINT,
    NS1Config,
    LoggingConfig,
    Config,
    load_config,
    get_config,
    reset_config,
)


class TestNS1Config:
    """Tests for NS1Config class."""

    def test_default_values(self):
        """Test default configuration values."""
        cfg = NS1Config()
        assert cfg.api_key == ""
        assert cfg.endpoint == "https://api.nsone.net/v1/"
        assert cfg.ignore_ssl is False
        assert cfg.timeout == 30

    def test_api_key_not_in_repr(self):
        """Test that the API key never shows up in logs."""
        cfg = NS1Config(api_key="supersecret")
        assert "supersecret" not in repr(cfg)

    def test_from_env(self):
        """Test loading configuration from environment variables."""
        env_vars = {
            "NS1_APIKEY": "envkey",
            "NS1_ENDPOINT": "https://ns1.internal/v1/",
            "NS1_IGNORE_SSL": "true",
            "NS1_TIMEOUT": "5",
        }
        with patch.dict(os.environ, env_vars, clear=False):
            cfg = NS1Config.from_env()
            assert cfg.api_key == "envkey"
            assert cfg.endpoint == "https://ns1.internal/v1/"
            assert cfg.ignore_ssl is True
            assert cfg.timeout == 5

    def test_from_env_defaults(self):
        """Test defaults when only the API key is set."""
        with patch.dict(os.environ, {"NS1_APIKEY": "k"}, clear=True):
            cfg = NS1Config.from_env()
            assert cfg.endpoint == DEFAULT_ENDPOINT
            assert cfg.ignore_ssl is False
            assert cfg.timeout == 30

    def test_from_env_missing_api_key_raises(self):
        """Test that missing API key raises ValueError."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="NS1_APIKEY"):
                NS1Config.from_env()


class TestLoggingConfig:
    """Tests for LoggingConfig class."""

    def test_default_values(self):
        assert LoggingConfig().log_level == "INFO"

    def test_from_env(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            assert LoggingConfig.from_env().log_level == "DEBUG"


class TestConfig:
    """Tests for the main Config class and singleton helpers."""

    def test_default(self):
        cfg = Config.default()
        assert cfg.ns1.endpoint == DEFAULT_ENDPOINT
        assert cfg.logging.log_level == "INFO"

    def test_from_env(self):
        with patch.dict(os.environ, {"NS1_APIKEY": "k", "LOG_LEVEL": "WARNING"}, clear=True):
            cfg = Config.from_env()
            assert cfg.ns1.api_key == "k"
            assert cfg.logging.log_level == "WARNING"

    def test_load_config_singleton(self):
        """Test that load_config caches the instance."""
        with patch.dict(os.environ, {"NS1_APIKEY": "k"}, clear=True):
            first = load_config()
            second = load_config()
            assert first is second
            assert get_config() is first

    def test_get_config_loads_when_missing(self):
        with patch.dict(os.environ, {"NS1_APIKEY": "k"}, clear=True):
            assert config.config is None
            cfg = get_config()
            assert cfg.ns1.api_key == "k"

    def test_reset_config(self):
        with patch.dict(os.environ, {"NS1_APIKEY": "k"}, clear=True):
            load_config()
            reset_config()
            assert config.config is None
