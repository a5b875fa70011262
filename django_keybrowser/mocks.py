"""Canned responses served when mock mode is on.

Nothing here touches a store or resolves a connection.
"""

from __future__ import annotations

import random
from typing import Any

from django_keybrowser.types import ApiResponse, HashValue, KeyInfo, KeyType, KeyValue, ScanPage

MOCK_KEYS = (
    KeyInfo("session:8452", KeyType.HASH, 342),
    KeyInfo("orders:stream", KeyType.STREAM, None),
    KeyInfo("cache:product:1", KeyType.STRING, 120),
    KeyInfo("cache:product:2", KeyType.STRING, 95),
    KeyInfo("feature-flags", KeyType.HASH, None),
)

MOCK_VALUE = HashValue(
    {
        "last_login": "2024-11-25T14:22:01Z",
        "ip_address": "192.168.1.105",
        "status": "active",
    },
)

MOCK_STATS: dict[str, dict[str, Any]] = {
    "server": {"redis_version": "7.2.4", "uptime_in_seconds": 93211, "uptime_in_days": 1},
    "memory": {"used_memory_human": "3.1G", "used_memory_peak_human": "3.4G", "maxmemory_human": "0B"},
    "clients": {"connected_clients": 18, "blocked_clients": 0},
    "stats": {"instantaneous_ops_per_sec": 42800, "keyspace_hits": 981220, "keyspace_misses": 11873},
    "keyspace": {"db0": {"keys": 124000, "expires": 31000, "avg_ttl": 905000}},
}

MOCK_SUMMARY: dict[str, Any] = {
    "version": "7.2.4",
    "uptimeSeconds": 93211,
    "connectedClients": 18,
    "opsPerSec": 42800,
    "usedMemoryHuman": "3.1G",
}


def mock_key_page() -> ApiResponse[ScanPage]:
    return ApiResponse.ok(ScanPage(keys=MOCK_KEYS, cursor=0))


def mock_key_info(key: str) -> ApiResponse[KeyInfo]:
    return ApiResponse.ok(KeyInfo(key, KeyType.HASH, 342))


def mock_value() -> ApiResponse[KeyValue]:
    return ApiResponse.ok(MOCK_VALUE)


def mock_db_size() -> ApiResponse[int]:
    return ApiResponse.ok(random.randint(0, 1999))  # noqa: S311


def mock_stats() -> ApiResponse[dict[str, Any]]:
    return ApiResponse.ok(MOCK_STATS)


def mock_summary() -> ApiResponse[dict[str, Any]]:
    return ApiResponse.ok(MOCK_SUMMARY)


def mock_done(message: str) -> ApiResponse[bool]:
    """Acknowledge a write without performing it."""
    return ApiResponse.ok(True, f"{message} (mock).")  # noqa: FBT003
