"""Single-command key and database operations."""

from __future__ import annotations

from typing import Any

from django_keybrowser.exceptions import ConfirmationMismatchError, InvalidRequestError, _ResponseError


def rename_key(client: Any, key: str, new_key: Any) -> None:
    """RENAME ``key``; a blank or non-string target or a missing source key is a bad request."""
    if new_key is not None and not isinstance(new_key, str):
        raise InvalidRequestError("New key is required", "newKey must be a string")
    new_key = (new_key or "").strip()
    if not new_key:
        raise InvalidRequestError("New key is required", "newKey is missing")
    try:
        client.rename(key, new_key)
    except _ResponseError as e:
        raise InvalidRequestError("Failed to rename key.", str(e)) from e


def set_expiry(client: Any, key: str, ttl_seconds: int | None) -> None:
    """EXPIRE ``key``, or PERSIST it when ``ttl_seconds`` is None."""
    if ttl_seconds is None:
        client.persist(key)
    else:
        client.expire(key, ttl_seconds)


def check_confirmation(confirm_name: str | None, target: str) -> None:
    """Exact, case-sensitive match between a confirmation and its target."""
    if confirm_name != target:
        raise ConfirmationMismatchError(target)


def delete_key(client: Any, key: str) -> int:
    return client.delete(key)


def flush_database(client: Any) -> None:
    """FLUSHDB on the database the client has selected."""
    client.flushdb()


def database_size(client: Any) -> int:
    return int(client.dbsize())
