"""Test fixtures for django-keybrowser."""

from tests.fixtures.containers import (
    RedisContainerInfo,
    redis_container,
    redis_container_factory,
    redis_images,
)
from tests.fixtures.store import (
    ConnectRecorder,
    cache_keys,
    connect_recorder,
    fake_redis,
)

__all__ = [
    "ConnectRecorder",
    "RedisContainerInfo",
    "cache_keys",
    "connect_recorder",
    "fake_redis",
    "redis_container",
    "redis_container_factory",
    "redis_images",
]
