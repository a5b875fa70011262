"""In-memory stand-in for the redis-py client calls the key browser makes.

SCAN follows the server's shape: the cursor is an offset into the
keyspace, COUNT decides how many slots one call walks, and MATCH/TYPE
filter only afterwards, so a call can return fewer matches than COUNT
(or none at all) while the cursor keeps moving.
"""

from __future__ import annotations

import fnmatch
from typing import Any

from redis.exceptions import ResponseError

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


class FakeConnectionPool:
    def __init__(self) -> None:
        self.disconnects = 0

    def disconnect(self) -> None:
        self.disconnects += 1


class FakePipeline:
    """Queues commands and runs them against the owning ``FakeRedis``."""

    def __init__(self, redis: FakeRedis, transaction: bool) -> None:
        self._redis = redis
        self.transaction = transaction
        self._commands: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name: str) -> Any:
        if not hasattr(self._redis, name):
            raise AttributeError(name)

        def queue(*args: Any, **kwargs: Any) -> FakePipeline:
            self._commands.append((name, args, kwargs))
            return self

        return queue

    def execute(self, raise_on_error: bool = True) -> list[Any]:  # noqa: FBT001, FBT002
        self._redis.round_trips += 1
        self._redis.pipelines.append((self.transaction, [c[0] for c in self._commands]))
        results: list[Any] = []
        for name, args, kwargs in self._commands:
            try:
                results.append(getattr(self._redis, name)(*args, _in_pipeline=True, **kwargs))
            except ResponseError as e:
                if raise_on_error:
                    raise
                results.append(e)
        self._commands.clear()
        return results


class FakeRedis:
    """A single logical database with string, hash, list, set, zset and stream keys."""

    def __init__(self) -> None:
        self.data: dict[str, tuple[str, Any]] = {}
        self.ttls: dict[str, int] = {}
        self.connection_pool = FakeConnectionPool()
        self.round_trips = 0
        self.scan_calls: list[dict[str, Any]] = []
        self.pipelines: list[tuple[bool, list[str]]] = []
        self.failing_keys: set[str] = set()
        self.closed = 0
        self.info_data: dict[str, Any] = {}

    # -- helpers -------------------------------------------------------------

    def _call(self, in_pipeline: bool) -> None:  # noqa: FBT001
        if not in_pipeline:
            self.round_trips += 1

    def _check(self, key: str) -> None:
        if key in self.failing_keys:
            raise ResponseError(f"ERR simulated failure for {key}")

    def _get(self, key: str, key_type: str) -> Any:
        entry = self.data.get(key)
        if entry is None:
            return None
        if entry[0] != key_type:
            raise ResponseError(WRONGTYPE)
        return entry[1]

    def seed(self, key: str, key_type: str, value: Any, ttl: int | None = None) -> None:
        self.data[key] = (key_type, value)
        if ttl is not None:
            self.ttls[key] = ttl

    def close(self) -> None:
        self.closed += 1

    def pipeline(self, transaction: bool = True) -> FakePipeline:  # noqa: FBT001, FBT002
        return FakePipeline(self, transaction)

    # -- keyspace ------------------------------------------------------------

    def scan(self, cursor: int = 0, match: str | None = None, count: int | None = None, _type: str | None = None, _in_pipeline: bool = False) -> tuple[int, list[str]]:  # noqa: FBT001, FBT002
        self._call(_in_pipeline)
        self.scan_calls.append({"cursor": cursor, "match": match, "count": count, "_type": _type})
        names = list(self.data)
        step = count or 10
        window = names[cursor : cursor + step]
        next_cursor = cursor + step if cursor + step < len(names) else 0
        batch = [
            name
            for name in window
            if (match is None or fnmatch.fnmatchcase(name, match)) and (_type is None or self.data[name][0] == _type)
        ]
        return next_cursor, batch

    def exists(self, *keys: str, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        return sum(1 for key in keys if key in self.data)

    def type(self, key: str, _in_pipeline: bool = False) -> str:
        self._call(_in_pipeline)
        self._check(key)
        entry = self.data.get(key)
        return entry[0] if entry else "none"

    def ttl(self, key: str, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        self._check(key)
        if key not in self.data:
            return -2
        return self.ttls.get(key, -1)

    def expire(self, key: str, seconds: int, _in_pipeline: bool = False) -> bool:
        self._call(_in_pipeline)
        if key not in self.data:
            return False
        self.ttls[key] = int(seconds)
        return True

    def persist(self, key: str, _in_pipeline: bool = False) -> bool:
        self._call(_in_pipeline)
        return self.ttls.pop(key, None) is not None

    def delete(self, *keys: str, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def rename(self, src: str, dst: str, _in_pipeline: bool = False) -> bool:
        self._call(_in_pipeline)
        if src not in self.data:
            raise ResponseError("no such key")
        self.data[dst] = self.data.pop(src)
        self.ttls.pop(dst, None)
        if src in self.ttls:
            self.ttls[dst] = self.ttls.pop(src)
        return True

    def flushdb(self, _in_pipeline: bool = False) -> bool:
        self._call(_in_pipeline)
        self.data.clear()
        self.ttls.clear()
        return True

    def dbsize(self, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        return len(self.data)

    def info(self, _in_pipeline: bool = False) -> dict[str, Any]:
        self._call(_in_pipeline)
        return dict(self.info_data)

    # -- values --------------------------------------------------------------

    def get(self, key: str, _in_pipeline: bool = False) -> str | None:
        self._call(_in_pipeline)
        return self._get(key, "string")

    def set(self, key: str, value: str, ex: int | None = None, _in_pipeline: bool = False) -> bool:
        self._call(_in_pipeline)
        self.data[key] = ("string", str(value))
        if ex is not None:
            self.ttls[key] = int(ex)
        else:
            self.ttls.pop(key, None)
        return True

    def hgetall(self, key: str, _in_pipeline: bool = False) -> dict[str, str]:
        self._call(_in_pipeline)
        return dict(self._get(key, "hash") or {})

    def hset(self, key: str, mapping: dict[str, str] | None = None, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        current = dict(self._get(key, "hash") or {})
        added = len(set(mapping or {}) - set(current))
        current.update(mapping or {})
        self.data[key] = ("hash", current)
        return added

    def lrange(self, key: str, start: int, end: int, _in_pipeline: bool = False) -> list[str]:
        self._call(_in_pipeline)
        items = list(self._get(key, "list") or [])
        return items[start:] if end == -1 else items[start : end + 1]

    def rpush(self, key: str, *values: str, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        items = list(self._get(key, "list") or [])
        items.extend(values)
        self.data[key] = ("list", items)
        return len(items)

    def smembers(self, key: str, _in_pipeline: bool = False) -> set[str]:
        self._call(_in_pipeline)
        return set(self._get(key, "set") or set())

    def sadd(self, key: str, *members: str, _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        current = set(self._get(key, "set") or set())
        added = len(set(members) - current)
        self.data[key] = ("set", current | set(members))
        return added

    def zrange(self, key: str, start: int, end: int, withscores: bool = False, _in_pipeline: bool = False) -> list[Any]:  # noqa: FBT001, FBT002
        self._call(_in_pipeline)
        members = sorted((self._get(key, "zset") or {}).items(), key=lambda item: (item[1], item[0]))
        members = members[start:] if end == -1 else members[start : end + 1]
        if withscores:
            return [(m, float(s)) for m, s in members]
        return [m for m, _ in members]

    def zadd(self, key: str, mapping: dict[str, float], _in_pipeline: bool = False) -> int:
        self._call(_in_pipeline)
        current = dict(self._get(key, "zset") or {})
        added = len(set(mapping) - set(current))
        current.update(mapping)
        self.data[key] = ("zset", current)
        return added

    def xrange(self, key: str, min: str = "-", max: str = "+", count: int | None = None, _in_pipeline: bool = False) -> list[tuple[str, dict[str, str]]]:  # noqa: A002
        self._call(_in_pipeline)
        entries = list(self._get(key, "stream") or [])
        return entries[:count] if count else entries

    def xadd(self, key: str, fields: dict[str, str], id: str = "*", _in_pipeline: bool = False) -> str:  # noqa: A002
        self._call(_in_pipeline)
        entries = list(self._get(key, "stream") or [])
        if id == "*":
            id = f"{len(entries) + 1}-0"  # noqa: A001
        entries.append((id, dict(fields)))
        self.data[key] = ("stream", entries)
        return id
