"""Store fixtures: the in-memory client wired in place of real connections."""

from collections.abc import Iterator

import pytest
from pytest_mock import MockerFixture

from django_keybrowser.connection import RedisConnector, ValkeyConnector
from tests.fixtures.fake_redis import FakeRedis


class ConnectRecorder:
    """Hands out the fake client and remembers which db each request selected."""

    def __init__(self, client: FakeRedis) -> None:
        self.client = client
        self.dbs: list[int | None] = []
        self.connection_names: list[str] = []

    def __call__(self, config, db=None) -> FakeRedis:
        self.connection_names.append(config.name)
        self.dbs.append(db)
        return self.client

    @property
    def count(self) -> int:
        return len(self.dbs)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def connect_recorder(fake_redis: FakeRedis, mocker: MockerFixture) -> Iterator[ConnectRecorder]:
    """Route every ``open_client`` to ``fake_redis``."""
    recorder = ConnectRecorder(fake_redis)
    mocker.patch.object(RedisConnector, "connect", side_effect=recorder)
    mocker.patch.object(ValkeyConnector, "connect", side_effect=recorder)
    yield recorder


@pytest.fixture
def cache_keys(fake_redis: FakeRedis) -> FakeRedis:
    """Seed the four-key keyspace used by the paging scenarios."""
    fake_redis.seed("cache:1", "string", "one")
    fake_redis.seed("cache:2", "string", "two", ttl=60)
    fake_redis.seed("cache:3", "hash", {"f": "v"})
    fake_redis.seed("other:1", "list", ["a"])
    return fake_redis
