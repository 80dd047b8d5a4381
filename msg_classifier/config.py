"""
Configuration management for MsgClassifier.

Settings cover the classification client, conversation storage, the live
message simulator and logging. Values come from defaults, overridden by
INBOX_* environment variables.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class InboxConfig(BaseModel):
    """Configuration model for the inbox application."""

    # Classification client
    anthropic_model: str = Field(
        default="claude-3-5-haiku-20241022",
        description="Claude model used for message classification"
    )

    max_tokens: int = Field(
        default=300,
        description="Maximum tokens in a classification response"
    )

    temperature: float = Field(
        default=0.0,
        description="Sampling temperature for classification"
    )

    classification_timeout_seconds: float = Field(
        default=30.0,
        description="Upper bound on a single classification call in seconds"
    )

    max_retries: int = Field(
        default=2,
        description="Retries the Anthropic client makes before giving up"
    )

    # Storage
    storage_backend: Literal["sqlite", "json"] = Field(
        default="sqlite",
        description="Where conversation snapshots are kept"
    )

    database_path: str = Field(
        default="./data/msg_classifier.db",
        description="SQLite database holding snapshots, contacts and profile"
    )

    json_store_path: str = Field(
        default="./data/msg_history.json",
        description="JSON file used when storage_backend is 'json'"
    )

    # Live simulator
    simulator_enabled: bool = Field(
        default=True,
        description="Whether simulated inbound messages are generated"
    )

    simulator_interval_seconds: float = Field(
        default=20.0,
        description="Seconds between simulated inbound messages"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root logging level"
    )

    log_dir: str = Field(
        default="logs",
        description="Directory for rotating log files"
    )

    @field_validator('max_tokens')
    @classmethod
    def validate_max_tokens(cls, v):
        if v <= 0:
            raise ValueError("max_tokens must be positive")
        if v > 4096:
            raise ValueError("max_tokens cannot exceed 4096")
        return v

    @field_validator('temperature')
    @classmethod
    def validate_temperature(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("temperature must be between 0.0 and 1.0")
        return v

    @field_validator('classification_timeout_seconds')
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("classification_timeout_seconds must be positive")
        if v > 300:  # 5 minutes max
            raise ValueError("classification_timeout_seconds cannot exceed 300 seconds")
        return v

    @field_validator('max_retries')
    @classmethod
    def validate_max_retries(cls, v):
        if v < 0:
            raise ValueError("max_retries must be non-negative")
        if v > 10:
            raise ValueError("max_retries cannot exceed 10")
        return v

    @field_validator('simulator_interval_seconds')
    @classmethod
    def validate_simulator_interval(cls, v):
        if v < 1:
            raise ValueError("simulator_interval_seconds must be at least 1 second")
        if v > 3600:
            raise ValueError("simulator_interval_seconds cannot exceed 3600 seconds")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log_level: {v}")
        return level


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> InboxConfig:
    """
    Load configuration from environment variables or defaults.

    Environment variables supported:
    - INBOX_MODEL: Claude model name
    - INBOX_MAX_TOKENS: Maximum response tokens
    - INBOX_TEMPERATURE: Sampling temperature
    - INBOX_CLASSIFY_TIMEOUT: Classification timeout in seconds
    - INBOX_MAX_RETRIES: Anthropic client retry count
    - INBOX_STORAGE: Storage backend (sqlite/json)
    - INBOX_DB_PATH: SQLite database path
    - INBOX_JSON_PATH: JSON history file path
    - INBOX_SIMULATOR: Enable live simulator (true/false)
    - INBOX_SIMULATOR_INTERVAL: Seconds between simulated messages
    - INBOX_LOG_LEVEL: Logging level
    - INBOX_LOG_DIR: Log directory

    Returns:
        InboxConfig: Configured settings instance
    """
    config_data = {}

    if model := os.getenv('INBOX_MODEL'):
        config_data['anthropic_model'] = model

    if max_tokens := os.getenv('INBOX_MAX_TOKENS'):
        config_data['max_tokens'] = int(max_tokens)

    if temperature := os.getenv('INBOX_TEMPERATURE'):
        config_data['temperature'] = float(temperature)

    if timeout := os.getenv('INBOX_CLASSIFY_TIMEOUT'):
        config_data['classification_timeout_seconds'] = float(timeout)

    if max_retries := os.getenv('INBOX_MAX_RETRIES'):
        config_data['max_retries'] = int(max_retries)

    if storage := os.getenv('INBOX_STORAGE'):
        config_data['storage_backend'] = storage.lower()

    if db_path := os.getenv('INBOX_DB_PATH'):
        config_data['database_path'] = db_path

    if json_path := os.getenv('INBOX_JSON_PATH'):
        config_data['json_store_path'] = json_path

    if simulator := os.getenv('INBOX_SIMULATOR'):
        config_data['simulator_enabled'] = _env_flag(simulator)

    if interval := os.getenv('INBOX_SIMULATOR_INTERVAL'):
        config_data['simulator_interval_seconds'] = float(interval)

    if log_level := os.getenv('INBOX_LOG_LEVEL'):
        config_data['log_level'] = log_level

    if log_dir := os.getenv('INBOX_LOG_DIR'):
        config_data['log_dir'] = log_dir

    return InboxConfig(**config_data)
