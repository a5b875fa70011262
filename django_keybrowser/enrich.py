"""Pipelined TYPE/TTL lookups for a batch of key names."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django_keybrowser.types import KeyInfo, normalize_key_type, normalize_ttl

if TYPE_CHECKING:
    from collections.abc import Sequence


def enrich(client: Any, keys: Sequence[str]) -> list[KeyInfo]:
    """Return one ``KeyInfo`` per key, in input order, from a single round trip.

    Errors are captured per command: a key that vanished or whose lookup
    failed comes back as ``unknown`` with no TTL, and its siblings are
    unaffected.
    """
    if not keys:
        return []

    pipe = client.pipeline(transaction=False)
    for key in keys:
        pipe.type(key)
        pipe.ttl(key)
    results = pipe.execute(raise_on_error=False)

    infos: list[KeyInfo] = []
    for index, key in enumerate(keys):
        raw_type = results[index * 2]
        raw_ttl = results[index * 2 + 1]
        infos.append(
            KeyInfo(
                key=key,
                type=normalize_key_type(None if isinstance(raw_type, Exception) else raw_type),
                ttl_seconds=None if isinstance(raw_ttl, Exception) else normalize_ttl(raw_ttl),
            ),
        )
    return infos
