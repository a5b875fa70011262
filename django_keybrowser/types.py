"""Types shared by the key browser API and the browser session layer.

Everything that crosses the HTTP boundary serializes to the camelCase JSON
shape the browser expects (``ttlSeconds``, ``isSuccess``...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class KeyType(StrEnum):
    """Redis key data types."""

    STRING = "string"
    HASH = "hash"
    LIST = "list"
    SET = "set"
    ZSET = "zset"
    STREAM = "stream"
    UNKNOWN = "unknown"


# Types a scan can be filtered by (SCAN ... TYPE <t>)
FILTERABLE_TYPES = tuple(t for t in KeyType if t is not KeyType.UNKNOWN)

_TYPE_ALIASES = {
    "sortedset": KeyType.ZSET,
}


def normalize_key_type(raw: str | bytes | None) -> KeyType:
    """Map a raw type name (from TYPE or a query string) onto ``KeyType``.

    Unrecognized names, including Redis' ``none`` for missing keys, map to
    ``KeyType.UNKNOWN``.
    """
    if isinstance(raw, bytes):
        raw = raw.decode()
    value = (raw or "").strip().lower()
    if value in _TYPE_ALIASES:
        return _TYPE_ALIASES[value]
    try:
        return KeyType(value)
    except ValueError:
        return KeyType.UNKNOWN


def normalize_type_filter(raw: str | None) -> KeyType | None:
    """Return the type filter for a scan, or None when the value means "all"."""
    key_type = normalize_key_type(raw)
    if key_type is KeyType.UNKNOWN:
        return None
    return key_type


def normalize_ttl(raw: Any) -> int | None:
    """Normalize a TTL reply: negative values (no expiry / missing) become None."""
    try:
        ttl = int(raw)
    except (TypeError, ValueError):
        return None
    return ttl if ttl >= 0 else None


# =============================================================================
# Keys and pages
# =============================================================================


@dataclass(frozen=True, slots=True)
class KeyInfo:
    """A key name with its type and remaining TTL (None = persistent)."""

    key: str
    type: KeyType = KeyType.UNKNOWN
    ttl_seconds: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "type": str(self.type), "ttlSeconds": self.ttl_seconds}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KeyInfo:
        return cls(
            key=str(data["key"]),
            type=normalize_key_type(data.get("type")),
            ttl_seconds=normalize_ttl(data.get("ttlSeconds")),
        )


@dataclass(frozen=True, slots=True)
class ScanPage:
    """One page of keys plus the cursor to resume from (0 = complete)."""

    keys: tuple[KeyInfo, ...] = ()
    cursor: int = 0
    truncated: bool = False

    @property
    def is_complete(self) -> bool:
        return self.cursor == 0 and not self.truncated

    def to_dict(self) -> dict[str, Any]:
        return {
            "keys": [info.to_dict() for info in self.keys],
            "cursor": self.cursor,
            "truncated": self.truncated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ScanPage:
        if not data:
            return cls()
        return cls(
            keys=tuple(KeyInfo.from_dict(item) for item in data.get("keys") or ()),
            cursor=int(data.get("cursor") or 0),
            truncated=bool(data.get("truncated", False)),
        )


@dataclass(frozen=True, slots=True)
class ScanQuery:
    """An immutable request for one page of keys."""

    pattern: str | None = None
    exact_key: str | None = None
    type: KeyType | None = None
    page_size: int = 100
    cursor: int = 0
    exhaustive: bool = False
    db: int | None = None

    def to_params(self) -> dict[str, str]:
        """Encode as query-string parameters, omitting defaults."""
        params: dict[str, str] = {}
        if self.pattern:
            params["pattern"] = self.pattern
        if self.exact_key:
            params["exactKey"] = self.exact_key
        if self.type is not None:
            params["type"] = str(self.type)
        if self.page_size:
            params["pageSize"] = str(self.page_size)
        if self.cursor:
            params["cursor"] = str(self.cursor)
        if self.exhaustive:
            params["exhaustive"] = "true"
        if self.db is not None:
            params["db"] = str(self.db)
        return params


# =============================================================================
# Values
# =============================================================================


@dataclass(frozen=True, slots=True)
class ZSetEntry:
    member: str
    score: float


@dataclass(frozen=True, slots=True)
class StreamEntry:
    id: str
    values: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str | None
    type: KeyType = field(default=KeyType.STRING, init=False)


@dataclass(frozen=True, slots=True)
class HashValue:
    value: dict[str, str]
    type: KeyType = field(default=KeyType.HASH, init=False)


@dataclass(frozen=True, slots=True)
class ListValue:
    value: list[str]
    type: KeyType = field(default=KeyType.LIST, init=False)


@dataclass(frozen=True, slots=True)
class SetValue:
    value: list[str]
    type: KeyType = field(default=KeyType.SET, init=False)


@dataclass(frozen=True, slots=True)
class ZSetValue:
    value: list[ZSetEntry]
    type: KeyType = field(default=KeyType.ZSET, init=False)


@dataclass(frozen=True, slots=True)
class StreamValue:
    value: list[StreamEntry]
    type: KeyType = field(default=KeyType.STREAM, init=False)


@dataclass(frozen=True, slots=True)
class UnknownValue:
    value: Any = None
    type: KeyType = field(default=KeyType.UNKNOWN, init=False)


type KeyValue = StringValue | HashValue | ListValue | SetValue | ZSetValue | StreamValue | UnknownValue


def value_to_dict(key_value: KeyValue) -> dict[str, Any]:
    """Serialize a ``KeyValue`` to ``{"type": ..., "value": ...}``."""
    match key_value:
        case ZSetValue(value=entries):
            payload: Any = [{"member": e.member, "score": e.score} for e in entries]
        case StreamValue(value=entries):
            payload = [{"id": e.id, "values": dict(e.values)} for e in entries]
        case HashValue(value=fields):
            payload = dict(fields)
        case ListValue(value=items) | SetValue(value=items):
            payload = list(items)
        case StringValue(value=text):
            payload = text
        case UnknownValue():
            payload = None
    return {"type": str(key_value.type), "value": payload}


def value_from_dict(data: dict[str, Any] | None) -> KeyValue:
    """Inverse of ``value_to_dict``; unrecognized shapes become ``UnknownValue``."""
    if not data:
        return UnknownValue()
    raw = data.get("value")
    match normalize_key_type(data.get("type")):
        case KeyType.STRING:
            return StringValue(None if raw is None else str(raw))
        case KeyType.HASH:
            return HashValue({str(k): str(v) for k, v in (raw or {}).items()})
        case KeyType.LIST:
            return ListValue([str(item) for item in raw or []])
        case KeyType.SET:
            return SetValue([str(item) for item in raw or []])
        case KeyType.ZSET:
            return ZSetValue([ZSetEntry(str(e.get("member", "")), float(e.get("score", 0))) for e in raw or []])
        case KeyType.STREAM:
            return StreamValue(
                [StreamEntry(str(e.get("id", "")), {str(k): str(v) for k, v in (e.get("values") or {}).items()}) for e in raw or []],
            )
        case KeyType.UNKNOWN:
            return UnknownValue(raw)


# =============================================================================
# Response envelope
# =============================================================================


@dataclass(slots=True)
class ApiResponse(Generic[T]):
    """The ``{isSuccess, message, reasons, data}`` envelope every endpoint returns."""

    is_success: bool
    data: T
    message: str = ""
    reasons: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T, message: str = "") -> ApiResponse[T]:
        return cls(is_success=True, data=data, message=message)

    @classmethod
    def fail(cls, data: T, message: str, *reasons: str) -> ApiResponse[T]:
        return cls(is_success=False, data=data, message=message, reasons=list(reasons))

    def to_dict(self) -> dict[str, Any]:
        data: Any = self.data
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        elif isinstance(data, (StringValue, HashValue, ListValue, SetValue, ZSetValue, StreamValue, UnknownValue)):
            data = value_to_dict(data)
        return {
            "isSuccess": self.is_success,
            "message": self.message,
            "reasons": list(self.reasons),
            "data": data,
        }
