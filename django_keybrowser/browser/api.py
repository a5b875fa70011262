"""Async client for the key browser JSON endpoints.

``KeysApi`` is what the session layer depends on; ``HttpKeysApi`` implements
it over ``httpx.AsyncClient``. Every call returns an ``ApiResponse``: a
non-2xx answer that still carries an envelope is returned as that (failed)
envelope, and transport errors become a failure envelope of their own.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from django_keybrowser.types import (
    ApiResponse,
    KeyInfo,
    KeyType,
    KeyValue,
    ScanPage,
    ScanQuery,
    UnknownValue,
    value_from_dict,
    value_to_dict,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=30.0, pool=5.0)


@runtime_checkable
class KeysApi(Protocol):
    """Operations the browser session needs from the server."""

    async def list_keys(self, connection_name: str, query: ScanQuery) -> ApiResponse[ScanPage]: ...

    async def get_key_info(self, connection_name: str, key: str, db: int | None = None) -> ApiResponse[KeyInfo | None]: ...

    async def get_value(
        self,
        connection_name: str,
        key: str,
        key_type: KeyType,
        db: int | None = None,
    ) -> ApiResponse[KeyValue]: ...

    async def set_value(
        self,
        connection_name: str,
        key: str,
        value: KeyValue,
        db: int | None = None,
        expiry_seconds: int | None = None,
    ) -> ApiResponse[bool]: ...

    async def rename_key(self, connection_name: str, key: str, new_key: str, db: int | None = None) -> ApiResponse[bool]: ...

    async def set_expiry(
        self,
        connection_name: str,
        key: str,
        ttl_seconds: int | None,
        db: int | None = None,
    ) -> ApiResponse[bool]: ...

    async def delete_key(self, connection_name: str, key: str, confirm_name: str, db: int | None = None) -> ApiResponse[bool]: ...

    async def flush_database(self, connection_name: str, db: int | None, confirm_name: str) -> ApiResponse[int]: ...

    async def database_size(self, connection_name: str, db: int) -> ApiResponse[int]: ...

    async def server_stats(self, connection_name: str) -> ApiResponse[dict[str, Any]]: ...

    async def server_summary(self, connection_name: str) -> ApiResponse[dict[str, Any]]: ...


def _key_info_or_none(data: Any) -> KeyInfo | None:
    return KeyInfo.from_dict(data) if isinstance(data, dict) and data.get("key") else None


def _as_int(data: Any) -> int:
    try:
        return int(data or 0)
    except (TypeError, ValueError):
        return 0


class HttpKeysApi:
    """``KeysApi`` over HTTP.

    Args:
        client: An ``httpx.AsyncClient`` whose ``base_url`` points at the
            mounted ``django_keybrowser.urls``.
        mock: Ask the server for canned data on every call.
    """

    def __init__(self, client: httpx.AsyncClient, *, mock: bool = False) -> None:
        self._client = client
        self.mock = mock

    @classmethod
    def from_url(cls, base_url: str, *, mock: bool = False, **client_kwargs: Any) -> HttpKeysApi:
        client_kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
        return cls(httpx.AsyncClient(base_url=base_url, **client_kwargs), mock=mock)

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _path(connection_name: str, *parts: str) -> str:
        segments = ["connections", quote(connection_name, safe=""), *(quote(p, safe="") for p in parts)]
        return "/".join(segments)

    async def _request[T](
        self,
        method: str,
        path: str,
        decode: Callable[[Any], T],
        failure_data: T,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> ApiResponse[T]:
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        if self.mock:
            query["mock"] = "true"
        try:
            response = await self._client.request(method, path, params=query, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return ApiResponse.fail(failure_data, "Request failed.", str(e) or e.__class__.__name__)

        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or "isSuccess" not in payload:
            return ApiResponse.fail(
                failure_data,
                f"Unexpected response from server ({response.status_code}).",
                response.text[:200],
            )

        data = payload.get("data")
        return ApiResponse(
            is_success=bool(payload["isSuccess"]) and response.is_success,
            data=decode(data) if data is not None else failure_data,
            message=str(payload.get("message") or ""),
            reasons=[str(r) for r in payload.get("reasons") or []],
        )

    # =========================================================================
    # Keys
    # =========================================================================

    async def list_keys(self, connection_name: str, query: ScanQuery) -> ApiResponse[ScanPage]:
        return await self._request(
            "GET",
            self._path(connection_name, "keys"),
            ScanPage.from_dict,
            ScanPage(),
            params=query.to_params(),
        )

    async def get_key_info(self, connection_name: str, key: str, db: int | None = None) -> ApiResponse[KeyInfo | None]:
        return await self._request(
            "GET",
            self._path(connection_name, "keys", key, "info"),
            _key_info_or_none,
            None,
            params={"db": db},
        )

    async def get_value(
        self,
        connection_name: str,
        key: str,
        key_type: KeyType,
        db: int | None = None,
    ) -> ApiResponse[KeyValue]:
        return await self._request(
            "GET",
            self._path(connection_name, "keys", key, "value"),
            value_from_dict,
            UnknownValue(),
            params={"type": str(key_type), "db": db},
        )

    async def set_value(
        self,
        connection_name: str,
        key: str,
        value: KeyValue,
        db: int | None = None,
        expiry_seconds: int | None = None,
    ) -> ApiResponse[bool]:
        body = value_to_dict(value)
        if expiry_seconds is not None:
            body["expirySeconds"] = expiry_seconds
        return await self._request(
            "POST",
            self._path(connection_name, "keys", key, "value"),
            bool,
            False,  # noqa: FBT003
            params={"db": db},
            json=body,
        )

    async def rename_key(self, connection_name: str, key: str, new_key: str, db: int | None = None) -> ApiResponse[bool]:
        return await self._request(
            "POST",
            self._path(connection_name, "keys", key, "rename"),
            bool,
            False,  # noqa: FBT003
            params={"db": db},
            json={"newKey": new_key},
        )

    async def set_expiry(
        self,
        connection_name: str,
        key: str,
        ttl_seconds: int | None,
        db: int | None = None,
    ) -> ApiResponse[bool]:
        return await self._request(
            "POST",
            self._path(connection_name, "keys", key, "expire"),
            bool,
            False,  # noqa: FBT003
            params={"db": db},
            json={"ttlSeconds": ttl_seconds},
        )

    async def delete_key(self, connection_name: str, key: str, confirm_name: str, db: int | None = None) -> ApiResponse[bool]:
        return await self._request(
            "DELETE",
            self._path(connection_name, "keys", key),
            bool,
            False,  # noqa: FBT003
            params={"db": db, "confirmName": confirm_name},
        )

    # =========================================================================
    # Databases and server
    # =========================================================================

    async def flush_database(self, connection_name: str, db: int | None, confirm_name: str) -> ApiResponse[int]:
        return await self._request(
            "POST",
            self._path(connection_name, "keys", "flush"),
            _as_int,
            0,
            params={"db": db, "confirmName": confirm_name},
        )

    async def database_size(self, connection_name: str, db: int) -> ApiResponse[int]:
        return await self._request(
            "GET",
            self._path(connection_name, "databases", str(db), "size"),
            _as_int,
            0,
        )

    async def server_stats(self, connection_name: str) -> ApiResponse[dict[str, Any]]:
        return await self._request(
            "GET",
            self._path(connection_name, "stats"),
            dict,
            {},
        )

    async def server_summary(self, connection_name: str) -> ApiResponse[dict[str, Any]]:
        return await self._request(
            "GET",
            self._path(connection_name, "summary"),
            dict,
            {},
        )
