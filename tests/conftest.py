"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import pytest

from batlab.config import AppConfig, default_config


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "linux: mark test as Linux-specific"
    )
    config.addinivalue_line(
        "markers", "freebsd: mark test as FreeBSD-specific"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )


@pytest.fixture
def app_config() -> AppConfig:
    """Built-in configuration with the stock tool names and paths."""
    return default_config()
