"""
Unit tests for the inbox configuration module.

Tests the InboxConfig class, validation, and environment variable loading.
"""

import os
import pytest
from unittest.mock import patch
from pydantic import ValidationError

from msg_classifier.config import InboxConfig, load_config


class TestInboxConfig:
    """Test the InboxConfig model and validation."""

    def test_default_config_values(self):
        """Test default configuration values."""
        config = InboxConfig()

        assert config.anthropic_model == "claude-3-5-haiku-20241022"
        assert config.max_tokens == 300
        assert config.temperature == 0.0
        assert config.classification_timeout_seconds == 30.0
        assert config.max_retries == 2
        assert config.storage_backend == "sqlite"
        assert config.database_path == "./data/msg_classifier.db"
        assert config.json_store_path == "./data/msg_history.json"
        assert config.simulator_enabled is True
        assert config.simulator_interval_seconds == 20.0
        assert config.log_level == "INFO"
        assert config.log_dir == "logs"

    def test_custom_config_values(self):
        """Test custom configuration values."""
        config = InboxConfig(
            anthropic_model="claude-3-5-sonnet-20241022",
            max_tokens=500,
            temperature=0.3,
            classification_timeout_seconds=10,
            max_retries=0,
            storage_backend="json",
            simulator_enabled=False,
            simulator_interval_seconds=5,
            log_level="debug",
        )

        assert config.anthropic_model == "claude-3-5-sonnet-20241022"
        assert config.max_tokens == 500
        assert config.temperature == 0.3
        assert config.classification_timeout_seconds == 10
        assert config.max_retries == 0
        assert config.storage_backend == "json"
        assert config.simulator_enabled is False
        assert config.simulator_interval_seconds == 5
        assert config.log_level == "DEBUG"

    def test_max_tokens_validation(self):
        """Test validation for max_tokens."""
        with pytest.raises(ValidationError, match="max_tokens must be positive"):
            InboxConfig(max_tokens=0)
        with pytest.raises(ValidationError, match="max_tokens cannot exceed 4096"):
            InboxConfig(max_tokens=5000)

    def test_temperature_validation(self):
        with pytest.raises(ValidationError, match="temperature must be between"):
            InboxConfig(temperature=1.5)

    def test_timeout_validation(self):
        """Test validation for classification_timeout_seconds."""
        with pytest.raises(ValidationError, match="classification_timeout_seconds must be positive"):
            InboxConfig(classification_timeout_seconds=0)
        with pytest.raises(ValidationError, match="cannot exceed 300 seconds"):
            InboxConfig(classification_timeout_seconds=301)

    def test_max_retries_validation(self):
        with pytest.raises(ValidationError, match="max_retries must be non-negative"):
            InboxConfig(max_retries=-1)
        with pytest.raises(ValidationError, match="max_retries cannot exceed 10"):
            InboxConfig(max_retries=11)

    def test_simulator_interval_validation(self):
        with pytest.raises(ValidationError, match="at least 1 second"):
            InboxConfig(simulator_interval_seconds=0.5)

    def test_storage_backend_validation(self):
        with pytest.raises(ValidationError):
            InboxConfig(storage_backend="redis")

    def test_log_level_validation(self):
        with pytest.raises(ValidationError, match="Unknown log_level"):
            InboxConfig(log_level="VERBOSE")


class TestLoadConfig:
    """Test configuration loading from environment variables."""

    def test_load_config_defaults(self):
        """Test loading config with no environment variables."""
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()

            assert config.max_tokens == 300
            assert config.storage_backend == "sqlite"
            assert config.simulator_enabled is True

    def test_load_config_from_environment(self):
        """Test loading config from environment variables."""
        env_vars = {
            'INBOX_MODEL': 'claude-3-opus-20240229',
            'INBOX_MAX_TOKENS': '128',
            'INBOX_TEMPERATURE': '0.5',
            'INBOX_CLASSIFY_TIMEOUT': '12.5',
            'INBOX_MAX_RETRIES': '4',
            'INBOX_STORAGE': 'JSON',
            'INBOX_DB_PATH': '/tmp/inbox.db',
            'INBOX_JSON_PATH': '/tmp/inbox.json',
            'INBOX_SIMULATOR': 'false',
            'INBOX_SIMULATOR_INTERVAL': '3',
            'INBOX_LOG_LEVEL': 'warning',
            'INBOX_LOG_DIR': '/tmp/logs',
        }

        with patch.dict(os.environ, env_vars, clear=True):
            config = load_config()

            assert config.anthropic_model == 'claude-3-opus-20240229'
            assert config.max_tokens == 128
            assert config.temperature == 0.5
            assert config.classification_timeout_seconds == 12.5
            assert config.max_retries == 4
            assert config.storage_backend == 'json'
            assert config.database_path == '/tmp/inbox.db'
            assert config.json_store_path == '/tmp/inbox.json'
            assert config.simulator_enabled is False
            assert config.simulator_interval_seconds == 3.0
            assert config.log_level == 'WARNING'
            assert config.log_dir == '/tmp/logs'

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("yes", True), ("ON", True), ("0", False), ("off", False),
    ])
    def test_simulator_flag_parsing(self, value, expected):
        with patch.dict(os.environ, {'INBOX_SIMULATOR': value}, clear=True):
            assert load_config().simulator_enabled is expected

    def test_load_config_invalid_environment_values(self):
        """Test loading config with invalid environment values."""
        with patch.dict(os.environ, {'INBOX_CLASSIFY_TIMEOUT': '-5'}, clear=True):
            with pytest.raises(ValidationError):
                load_config()

        with patch.dict(os.environ, {'INBOX_MAX_TOKENS': 'many'}, clear=True):
            with pytest.raises(ValueError):
                load_config()
