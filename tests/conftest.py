"""Pytest configuration for django-keybrowser tests."""

import sys
from pathlib import Path

import pytest

from tests.fixtures import (
    cache_keys,
    connect_recorder,
    fake_redis,
    redis_container,
    redis_container_factory,
    redis_images,
)

# Re-export fixtures so pytest can discover them
__all__ = [
    "cache_keys",
    "connect_recorder",
    "fake_redis",
    "no_mock_env",
    "redis_container",
    "redis_container_factory",
    "redis_images",
]


def pytest_configure(config):
    """Add tests directory to Python path."""
    sys.path.insert(0, str(Path(__file__).absolute().parent))


@pytest.fixture(autouse=True)
def no_mock_env(monkeypatch):
    """Keep a developer's BFF_USE_MOCKS from leaking into the tests."""
    monkeypatch.delenv("BFF_USE_MOCKS", raising=False)
