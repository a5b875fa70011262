"""Type-dispatched value reads and writes for a single key."""

from __future__ import annotations

from typing import Any

from django_keybrowser.conf import get_setting
from django_keybrowser.exceptions import InvalidRequestError, UnsupportedKeyTypeError
from django_keybrowser.types import (
    HashValue,
    KeyType,
    KeyValue,
    ListValue,
    SetValue,
    StreamEntry,
    StreamValue,
    StringValue,
    ZSetEntry,
    ZSetValue,
)


def read_value(client: Any, key: str, key_type: KeyType) -> KeyValue:
    """Read the whole value of ``key`` as ``key_type``.

    Streams are capped at ``STREAM_READ_COUNT`` entries from the start.

    Raises:
        UnsupportedKeyTypeError: For ``KeyType.UNKNOWN``.
    """
    match key_type:
        case KeyType.STRING:
            return StringValue(client.get(key))
        case KeyType.HASH:
            return HashValue({str(k): str(v) for k, v in (client.hgetall(key) or {}).items()})
        case KeyType.LIST:
            return ListValue([str(i) for i in client.lrange(key, 0, -1)])
        case KeyType.SET:
            return SetValue(sorted(str(m) for m in client.smembers(key)))
        case KeyType.ZSET:
            return ZSetValue([ZSetEntry(str(m), float(s)) for m, s in client.zrange(key, 0, -1, withscores=True)])
        case KeyType.STREAM:
            entries = client.xrange(key, "-", "+", count=get_setting("STREAM_READ_COUNT"))
            return StreamValue([StreamEntry(str(entry_id), dict(fields)) for entry_id, fields in entries])
        case _:
            raise UnsupportedKeyTypeError(str(key_type))


def _as_list(payload: Any, key_type: KeyType, what: str) -> list[Any]:
    if not isinstance(payload, list):
        raise InvalidRequestError(f"Invalid {key_type} payload", f"Expected array of {what}")
    return payload


def write_value(
    client: Any,
    key: str,
    key_type: KeyType,
    payload: Any,
    expiry_seconds: int | None = None,
) -> str:
    """Write ``payload`` to ``key`` and return a short status message.

    Collections (list, set, zset) are replaced wholesale in one transaction.
    Stream entries are appended; a blank id lets the server assign one.

    Raises:
        InvalidRequestError: If the payload shape does not fit ``key_type``.
        UnsupportedKeyTypeError: For ``KeyType.UNKNOWN``.
    """
    match key_type:
        case KeyType.STRING:
            text = "" if payload is None else str(payload)
            if expiry_seconds and expiry_seconds > 0:
                client.set(key, text, ex=expiry_seconds)
            else:
                client.set(key, text)
            return "Updated"

        case KeyType.HASH:
            if payload is not None and not isinstance(payload, dict):
                raise InvalidRequestError("Invalid hash payload", "Expected object of field/value pairs")
            fields = {str(k): str(v) for k, v in (payload or {}).items()}
            if fields:
                client.hset(key, mapping=fields)
            else:
                client.delete(key)
            return "Updated"

        case KeyType.LIST | KeyType.SET:
            items = [str(i) for i in _as_list(payload, key_type, "strings")]
            pipe = client.pipeline(transaction=True)
            pipe.delete(key)
            if items:
                if key_type is KeyType.LIST:
                    pipe.rpush(key, *items)
                else:
                    pipe.sadd(key, *items)
            pipe.execute()
            label = "List" if key_type is KeyType.LIST else "Set"
            return f"{label} updated" if items else f"{label} cleared"

        case KeyType.ZSET:
            entries = _as_list(payload, key_type, "entries")
            try:
                mapping = {str(e.get("member", "")): float(e.get("score") or 0) for e in entries}
            except (AttributeError, TypeError, ValueError):
                raise InvalidRequestError("Invalid zset payload", "Expected array of entries") from None
            pipe = client.pipeline(transaction=True)
            pipe.delete(key)
            if mapping:
                pipe.zadd(key, mapping)
            pipe.execute()
            return "ZSet updated" if mapping else "ZSet cleared"

        case KeyType.STREAM:
            entries = _as_list(payload, key_type, "entries")
            for entry in entries:
                values = entry.get("values") if isinstance(entry, dict) else None
                if not isinstance(values, dict) or not values:
                    raise InvalidRequestError("Invalid stream payload", "Every entry needs at least one field")
            for entry in entries:
                entry_id = str(entry.get("id") or "").strip() or "*"
                fields = {str(k): str(v) for k, v in (entry.get("values") or {}).items()}
                client.xadd(key, fields, id=entry_id)
            return "Stream updated"

        case _:
            raise UnsupportedKeyTypeError(str(key_type), "write")
