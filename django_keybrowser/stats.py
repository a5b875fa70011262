"""Server statistics from INFO."""

from __future__ import annotations

from typing import Any

SECTION_FIELDS: dict[str, tuple[str, ...]] = {
    "server": (
        "redis_version",
        "valkey_version",
        "os",
        "arch_bits",
        "uptime_in_seconds",
        "uptime_in_days",
        "tcp_port",
        "process_id",
        "run_id",
    ),
    "memory": (
        "used_memory",
        "used_memory_human",
        "used_memory_peak",
        "used_memory_peak_human",
        "maxmemory",
        "maxmemory_human",
        "maxmemory_policy",
    ),
    "clients": (
        "connected_clients",
        "blocked_clients",
        "tracking_clients",
    ),
    "stats": (
        "total_connections_received",
        "total_commands_processed",
        "instantaneous_ops_per_sec",
        "keyspace_hits",
        "keyspace_misses",
        "expired_keys",
        "evicted_keys",
    ),
}


def parse_info(raw_info: dict[str, Any]) -> dict[str, Any]:
    """Group flat INFO output into ``server``/``memory``/``clients``/``stats``/``keyspace``.

    Fields the server does not report are left out.
    """
    sections: dict[str, Any] = {
        name: {field: raw_info[field] for field in fields if field in raw_info}
        for name, fields in SECTION_FIELDS.items()
    }
    sections["keyspace"] = {k: v for k, v in raw_info.items() if k.startswith("db") and isinstance(v, dict)}
    return sections


def server_stats(client: Any) -> dict[str, Any]:
    return parse_info(client.info() or {})


def _number(value: Any) -> int | float | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def summarize(raw_info: dict[str, Any]) -> dict[str, Any]:
    """Headline figures for an overview: version, uptime, clients, ops/s and memory.

    Figures the server does not report are left out.
    """
    summary = {
        "version": raw_info.get("redis_version") or raw_info.get("valkey_version"),
        "uptimeSeconds": _number(raw_info.get("uptime_in_seconds")),
        "connectedClients": _number(raw_info.get("connected_clients")),
        "opsPerSec": _number(raw_info.get("instantaneous_ops_per_sec")),
        "usedMemoryHuman": raw_info.get("used_memory_human"),
    }
    return {name: value for name, value in summary.items() if value is not None}


def server_summary(client: Any) -> dict[str, Any]:
    return summarize(client.info() or {})
