"""Bounded SCAN over a Redis/Valkey keyspace.

SCAN's COUNT is only a hint: a round trip can return zero matches under a
sparse pattern or far more than asked for. Every loop here is bounded by a
maximum number of round trips and accumulates unique names in a set, so a
page never holds duplicates nor more than ``limit`` keys.
"""

from __future__ import annotations

import logging
from typing import Any

from django_keybrowser.conf import get_setting
from django_keybrowser.enrich import enrich
from django_keybrowser.types import KeyInfo, KeyType, ScanPage, normalize_key_type, normalize_ttl

logger = logging.getLogger(__name__)

MAX_SCAN_ITERATIONS = 100


def _max_iterations() -> int:
    configured = get_setting("MAX_SCAN_ITERATIONS")
    return int(configured) if configured else MAX_SCAN_ITERATIONS


def _collect(
    client: Any,
    cursor: int,
    pattern: str,
    limit: int,
    type_filter: KeyType | None,
    *,
    stop_at_limit: bool = True,
) -> tuple[set[str], int, bool]:
    """Run the accumulation loop.

    Returns the collected names, the last cursor seen and whether the loop
    stopped at the iteration ceiling.
    """
    found: set[str] = set()
    next_cursor = cursor
    scan_kw: dict[str, Any] = {"match": pattern, "count": limit}
    if type_filter is not None:
        scan_kw["_type"] = str(type_filter)

    max_iterations = _max_iterations()
    for _ in range(max_iterations):
        next_cursor, batch = client.scan(cursor=next_cursor, **scan_kw)
        next_cursor = int(next_cursor)
        found.update(batch)
        if next_cursor == 0 or (stop_at_limit and len(found) >= limit):
            return found, next_cursor, False

    logger.warning("SCAN for pattern '%s' stopped after %d round trips", pattern, max_iterations)
    return found, next_cursor, True


def _page(found: set[str], limit: int) -> tuple[KeyInfo, ...]:
    # SCAN cannot resume mid-batch, so overflow from the last batch is dropped
    return tuple(KeyInfo(key) for key in list(found)[:limit])


def scan_page(
    client: Any,
    cursor: int,
    pattern: str,
    limit: int,
    type_filter: KeyType | None = None,
) -> ScanPage:
    """Scan one page of up to ``limit`` distinct keys starting at ``cursor``.

    The returned cursor is the last one SCAN reported (0 once iteration is
    complete). Keys come back with ``unknown`` type; enrich them separately.
    """
    found, next_cursor, _ = _collect(client, cursor, pattern, limit, type_filter)
    return ScanPage(keys=_page(found, limit), cursor=next_cursor)


def scan_exhaustive(
    client: Any,
    pattern: str,
    limit: int,
    type_filter: KeyType | None = None,
) -> ScanPage:
    """Scan from cursor 0 until the store reports completion or the ceiling is hit.

    Always returns cursor 0. ``truncated`` is set when the page is known to
    be incomplete: the ceiling stopped the loop before the store finished
    iterating, or more than ``limit`` keys matched.
    """
    found, next_cursor, hit_ceiling = _collect(client, 0, pattern, limit, type_filter, stop_at_limit=False)
    return ScanPage(
        keys=_page(found, limit),
        cursor=0,
        truncated=(hit_ceiling and next_cursor != 0) or len(found) > limit,
    )


def get_key_info(client: Any, key: str) -> KeyInfo:
    """TYPE and TTL of a single key in one round trip."""
    return enrich(client, [key])[0]


def get_exact(client: Any, exact_key: str, type_filter: KeyType | None = None) -> ScanPage:
    """Look up one literal key name without scanning.

    Returns an empty page when the key is missing or excluded by ``type_filter``.
    """
    pipe = client.pipeline(transaction=False)
    pipe.exists(exact_key)
    pipe.type(exact_key)
    pipe.ttl(exact_key)
    exists, raw_type, raw_ttl = pipe.execute()

    if not exists:
        return ScanPage()
    key_type = normalize_key_type(raw_type)
    if type_filter is not None and key_type is not type_filter:
        return ScanPage()
    return ScanPage(keys=(KeyInfo(exact_key, key_type, normalize_ttl(raw_ttl)),))
