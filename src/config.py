"""
Configuration module for the NS1 monitoring job reconciler.

Loads configuration from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_ENDPOINT = "https://api.nsone.net/v1/"


@dataclass
class NS1Config:
    """NS1 API connection configuration."""

    api_key: str = field(default="", repr=False)  # Never log the key
    endpoint: str = DEFAULT_ENDPOINT
    ignore_ssl: bool = False
    timeout: int = 30  # seconds

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        api_key = os.getenv("NS1_APIKEY", "")
        if not api_key:
            raise ValueError(
                "NS1_APIKEY environment variable must be set. "
                "API key cannot be empty."
            )

        return cls(
            api_key=api_key,
            endpoint=os.getenv("NS1_ENDPOINT", DEFAULT_ENDPOINT),
            ignore_ssl=os.getenv("NS1_IGNORE_SSL", "false").lower() == "true",
            timeout=int(os.getenv("NS1_TIMEOUT", "30")),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(log_level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class Config:
    """Main configuration object."""

    ns1: NS1Config
    logging: LoggingConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            ns1=NS1Config.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            ns1=NS1Config(),
            logging=LoggingConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
