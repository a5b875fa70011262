"""Fixtures for the browser-side session tests."""

import pytest

from django_keybrowser.browser import KeyBrowserSession, KeyStore, LoggingNotifier, ValueCache
from django_keybrowser.types import HashValue, ListValue, StringValue
from tests.fixtures.keys_api import FakeKeysApi


@pytest.fixture
def api() -> FakeKeysApi:
    keys_api = FakeKeysApi()
    keys_api.seed("cache:1", StringValue("one"))
    keys_api.seed("cache:2", StringValue("two"), ttl=60)
    keys_api.seed("cache:3", HashValue({"f": "v"}))
    keys_api.seed("other:1", ListValue(["a"]))
    return keys_api


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def store(api, notifier) -> KeyStore:
    return KeyStore(api, "local", notifier, page_size=10)


@pytest.fixture
def value_cache(api, notifier) -> ValueCache:
    return ValueCache(api, "local", notifier)


@pytest.fixture
def session(api, notifier) -> KeyBrowserSession:
    return KeyBrowserSession(api, "local", notifier, page_size=10)
