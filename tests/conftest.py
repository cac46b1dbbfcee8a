"""Pytest configuration and fixtures."""

import pytest
from unittest.mock import AsyncMock, MagicMock

import config


@pytest.fixture(autouse=True)
def fresh_config():
    """Ensure each test loads configuration from its own environment."""
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def mock_client():
    """Create a mock NS1 client exposing an async jobs service."""
    client = MagicMock()
    client.jobs = MagicMock()
    client.jobs.create = AsyncMock()
    client.jobs.get = AsyncMock()
    client.jobs.update = AsyncMock()
    client.jobs.delete = AsyncMock(return_value=None)
    return client


@pytest.fixture
def sample_declaration():
    """Declared monitoring job as an operator would write it."""
    return {
        "name": "check1",
        "job_type": "tcp",
        "regions": ["was", "lga"],
        "frequency": 60,
        "config": {"ssl": "1", "host": "1.2.3.4", "port": "443"},
        "policy": "quorum",
        "rules": [
            {"key": "rtt", "comparison": "<", "value": "100"},
            {"key": "connect", "comparison": "==", "value": "ok"},
        ],
    }


@pytest.fixture
def sample_job_body():
    """Monitoring job body as returned by the NS1 API."""
    return {
        "id": "5e8f1a2b3c4d5e6f7a8b9c0d",
        "name": "check1",
        "job_type": "tcp",
        "active": True,
        "mute": False,
        "regions": ["was", "lga"],
        "region_scope": "fixed",
        "frequency": 60,
        "rapid_recheck": False,
        "policy": "quorum",
        "notes": "",
        "config": {"ssl": True, "host": "1.2.3.4", "port": 443},
        "rules": [
            {"key": "rtt", "comparison": "<", "value": 100},
            {"key": "connect", "comparison": "==", "value": "ok"},
        ],
        "notify_delay": 0,
        "notify_repeat": 0,
        "notify_failback": True,
        "notify_regional": False,
        "notify_list": None,
        "status": {"global": {"status": "up", "since": 1600000000}},
    }
