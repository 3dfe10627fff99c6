"""Pytest configuration and shared fixtures."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from todotxt.config import Config  # noqa: E402
from todotxt.utils.datetime import fixed_clock  # noqa: E402

TODAY = date(2024, 3, 10)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    """Clock frozen at 2024-03-10."""
    return fixed_clock(TODAY)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the user's configuration file."""
    monkeypatch.setenv("TODOTXT_CONFIG", str(tmp_path / "missing-config.yaml"))
    Config._instance = None
    yield
    Config._instance = None
