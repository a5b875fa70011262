"""Per-request store connections.

Connections are resolved by name from ``KEYBROWSER["CONNECTIONS"]`` (or, as a
fallback, from a Redis/Valkey entry in Django's ``CACHES``). Every request
opens its own client through ``open_client`` and closes it again on every
exit path; nothing is pooled across requests.

Connectors follow a class attributes pattern so the underlying library can be
swapped:

- ``RedisConnector``: redis-py
- ``ValkeyConnector``: valkey-py
"""

from __future__ import annotations

import contextlib
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from django.conf import settings

from django_keybrowser.conf import get_setting
from django_keybrowser.exceptions import ConnectionNotFoundError, InvalidRequestError

if TYPE_CHECKING:
    from collections.abc import Iterator

try:
    import redis
except ImportError:
    redis = None  # type: ignore[assignment]

try:
    import valkey
except ImportError:
    valkey = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6379
_URL_SCHEMES = ("redis://", "rediss://", "valkey://", "valkeys://", "unix://")


@dataclass(frozen=True, slots=True)
class ConnectionConfig:
    """Resolved connection details for one named connection."""

    name: str
    location: str
    library: str = "redis"
    options: dict[str, Any] = field(default_factory=dict)


def _from_caches(name: str) -> ConnectionConfig | None:
    cache_config = getattr(settings, "CACHES", {}).get(name)
    if not cache_config:
        return None
    backend = str(cache_config.get("BACKEND", "")).lower()
    if "redis" not in backend and "valkey" not in backend:
        return None
    location = cache_config.get("LOCATION", "")
    if isinstance(location, (list, tuple)):
        location = location[0] if location else ""
    else:
        location = re.split("[;,]", str(location))[0]
    if not location:
        return None
    return ConnectionConfig(
        name=name,
        location=location,
        library="valkey" if "valkey" in backend else "redis",
    )


def resolve_connection(name: str) -> ConnectionConfig:
    """Resolve a connection name to its configuration.

    Raises:
        ConnectionNotFoundError: If the name is neither in ``CONNECTIONS`` nor
            a Redis/Valkey cache in ``CACHES``.
    """
    connections = get_setting("CONNECTIONS")
    entry = connections.get(name)
    if entry is not None:
        location = str(entry.get("LOCATION", "")).strip()
        if not location:
            raise ConnectionNotFoundError(name)
        return ConnectionConfig(
            name=name,
            location=location,
            library=str(entry.get("LIBRARY", "redis")).lower(),
            options=dict(entry.get("OPTIONS", {})),
        )
    config = _from_caches(name)
    if config is None:
        raise ConnectionNotFoundError(name)
    return config


def available_connections() -> list[dict[str, str]]:
    """Names and libraries of every connection ``resolve_connection`` accepts."""
    result = [
        {"name": name, "library": str(entry.get("LIBRARY", "redis")).lower(), "source": "keybrowser"}
        for name, entry in get_setting("CONNECTIONS").items()
        if entry.get("LOCATION")
    ]
    seen = {item["name"] for item in result}
    for name in getattr(settings, "CACHES", {}):
        if name in seen:
            continue
        config = _from_caches(name)
        if config is not None:
            result.append({"name": name, "library": config.library, "source": "caches"})
    return result


def parse_connection_string(raw: str) -> dict[str, Any]:
    """Parse the ``host:port,password=...,ssl=true,defaultDatabase=N`` form.

    Returns connection keyword arguments (``host``, ``port`` and, when given,
    ``password``, ``ssl`` and ``db``). URLs are not handled here.
    """
    host_part, *params = raw.strip().split(",")
    host, _, port_text = host_part.partition(":")
    result: dict[str, Any] = {"host": host.strip() or "localhost", "port": DEFAULT_PORT}
    if port_text.strip().isdigit():
        result["port"] = int(port_text)

    for param in params:
        name, _, value = param.partition("=")
        name = name.strip().lower()
        value = value.strip()
        if not name:
            continue
        if name == "password":
            result["password"] = value
        elif name == "ssl":
            result["ssl"] = value.lower() == "true"
        elif name == "defaultdatabase" and value.isdigit():
            result["db"] = int(value)
    return result


# =============================================================================
# Connectors
# =============================================================================


class Connector:
    """Builds a single-use client for a ``ConnectionConfig``.

    Subclasses must set:
    - _lib: The library module (e.g., redis or valkey)
    - _client_class: The client class (e.g., redis.Redis)
    - _pool_class: The connection pool class
    - _ssl_connection_class: Connection class used for TLS
    """

    _lib: Any = None
    _client_class: type | None = None
    _pool_class: type | None = None
    _ssl_connection_class: type | None = None

    def connection_kwargs(self, config: ConnectionConfig, db: int | None = None) -> dict[str, Any]:
        """Build connection-pool keyword arguments; an explicit ``db`` wins over the location's."""
        if self._lib is None:
            msg = f"Connection '{config.name}' needs the '{config.library}' client library installed."
            raise InvalidRequestError("Client library not available.", msg)

        location = config.location
        kwargs: dict[str, Any] = dict(config.options)
        if location.startswith(_URL_SCHEMES):
            if location.startswith("valkey"):
                location = "redis" + location.removeprefix("valkey")
            kwargs.update(self._lib.connection.parse_url(location))
        else:
            parsed = parse_connection_string(location)
            if parsed.pop("ssl", False):
                kwargs["connection_class"] = self._ssl_connection_class
            kwargs.update(parsed)

        if db is not None:
            kwargs["db"] = db
        kwargs.setdefault("decode_responses", True)
        return kwargs

    def connect(self, config: ConnectionConfig, db: int | None = None) -> Any:
        assert self._client_class is not None, "Subclasses must set _client_class"  # noqa: S101
        assert self._pool_class is not None, "Subclasses must set _pool_class"  # noqa: S101
        pool = self._pool_class(**self.connection_kwargs(config, db))
        return self._client_class(connection_pool=pool)


class RedisConnector(Connector):
    """Connector using redis-py."""

    if redis is not None:
        _lib = redis
        _client_class = redis.Redis
        _pool_class = redis.ConnectionPool
        _ssl_connection_class = redis.SSLConnection


class ValkeyConnector(Connector):
    """Connector using valkey-py."""

    if valkey is not None:
        _lib = valkey
        _client_class = valkey.Valkey
        _pool_class = valkey.ConnectionPool
        _ssl_connection_class = valkey.SSLConnection


CONNECTORS: dict[str, type[Connector]] = {
    "redis": RedisConnector,
    "valkey": ValkeyConnector,
}


def get_connector(library: str) -> Connector:
    try:
        return CONNECTORS[library]()
    except KeyError:
        raise InvalidRequestError("Unknown client library.", f"LIBRARY must be one of {sorted(CONNECTORS)}.") from None


@contextlib.contextmanager
def open_client(connection_name: str, db: int | None = None) -> Iterator[Any]:
    """Open a client for one request and always release it afterwards."""
    config = resolve_connection(connection_name)
    logger.debug("Opening %s connection '%s' (db=%s)", config.library, connection_name, db)
    client = get_connector(config.library).connect(config, db)
    try:
        yield client
    finally:
        try:
            client.close()
        finally:
            client.connection_pool.disconnect()
