"""Pytest configuration and fixtures for xedeadlock tests."""

from datetime import datetime
from pathlib import Path

import pytest


def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that do not require external dependencies"
    )
    config.addinivalue_line("markers", "parser: Tests for trace sources")
    config.addinivalue_line(
        "markers", "business_logic: Tests for extraction and correlation logic"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests combining multiple components"
    )
    config.addinivalue_line("markers", "cli: Tests driving the click commands")


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def system_health_fixture(fixtures_dir):
    """Return path to the exported system_health sample."""
    return fixtures_dir / "system_health_sample.xml"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temporary location for every test."""
    config_path = tmp_path / "config" / "config.toml"
    monkeypatch.setenv("XEDEADLOCK_CONFIG", str(config_path))
    return config_path


@pytest.fixture
def t0():
    """A fixed event time."""
    return datetime(2024, 3, 1, 10, 15, 42, 123000)
