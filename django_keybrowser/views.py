"""JSON endpoints of the key browser.

Every endpoint answers with the ``{isSuccess, message, reasons, data}``
envelope; no exception escapes a view. Mock mode (``?mock=true`` or the
``USE_MOCKS`` setting) is checked before anything else, so it never
resolves a connection nor touches a store.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import TYPE_CHECKING, Any

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from django_keybrowser import mocks
from django_keybrowser.conf import use_mocks
from django_keybrowser.connection import available_connections, open_client
from django_keybrowser.exceptions import InvalidRequestError, KeyBrowserError, _main_exceptions
from django_keybrowser.listing import list_keys, parse_scan_query
from django_keybrowser.operations import (
    check_confirmation,
    database_size,
    delete_key,
    flush_database,
    rename_key,
    set_expiry,
)
from django_keybrowser.scan import get_key_info
from django_keybrowser.stats import server_stats, server_summary
from django_keybrowser.types import ApiResponse, ScanPage, UnknownValue, normalize_key_type
from django_keybrowser.values import read_value, write_value

if TYPE_CHECKING:
    from collections.abc import Callable

    from django.http import HttpRequest

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def envelope_response(envelope: ApiResponse[Any], status: int | None = None) -> JsonResponse:
    if status is None:
        status = 200 if envelope.is_success else 500
    return JsonResponse(envelope.to_dict(), status=status)


def mock_requested(request: HttpRequest) -> bool:
    return request.GET.get("mock") == "true" or use_mocks()


def parse_db(raw: str | None) -> int | None:
    """Parse a database index; blank means the connection's default."""
    if raw is None or not raw.strip():
        return None
    try:
        db = int(raw)
    except ValueError:
        db = -1
    if db < 0:
        raise InvalidRequestError("Invalid database index.", "Database index must be zero or greater.")
    return db


def parse_body(request: HttpRequest) -> dict[str, Any]:
    try:
        body = json.loads(request.body or b"{}")
    except ValueError as e:
        raise InvalidRequestError("Malformed JSON body.", str(e)) from None
    if not isinstance(body, dict):
        raise InvalidRequestError("Malformed JSON body.", "Expected a JSON object.")
    return body


def parse_seconds(raw: Any, field: str) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        seconds = int(raw)
    except (TypeError, ValueError, OverflowError):
        seconds = -1
    if seconds < 0:
        raise InvalidRequestError("Invalid expiry.", f"{field} must be a non-negative integer or null.")
    return seconds


def api_view(*methods: str, failure_message: str, failure_data: Any = None) -> Callable:
    """Decorate a view so every outcome is an envelope.

    ``KeyBrowserError`` answers with its own status; store errors are logged
    and answer 500 with the error text in ``reasons``.
    """

    def decorator(view: Callable[..., JsonResponse]) -> Callable[..., JsonResponse]:
        @functools.wraps(view)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
            try:
                return view(request, *args, **kwargs)
            except KeyBrowserError as e:
                return envelope_response(ApiResponse.fail(failure_data, e.message, *e.reasons), e.status)
            except _main_exceptions as e:
                logger.exception("Error handling %s %s", request.method, request.path)
                return envelope_response(ApiResponse.fail(failure_data, failure_message, str(e)), 500)

        return csrf_exempt(require_http_methods(list(methods))(wrapper))

    return decorator


# =============================================================================
# Connections and databases
# =============================================================================


@api_view("GET", failure_message="Failed to list connections.", failure_data=[])
def connections(request: HttpRequest) -> JsonResponse:
    return envelope_response(ApiResponse.ok(available_connections()))


@api_view("GET", failure_message="Failed to read database size.", failure_data=0)
def database_size_view(request: HttpRequest, name: str, db: str) -> JsonResponse:
    db_index = parse_db(db)
    if mock_requested(request):
        return envelope_response(mocks.mock_db_size())
    with open_client(name, db_index) as client:
        return envelope_response(ApiResponse.ok(database_size(client)))


@api_view("GET", failure_message="Failed to load server stats.", failure_data={})
def stats(request: HttpRequest, name: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_stats())
    with open_client(name) as client:
        return envelope_response(ApiResponse.ok(server_stats(client)))


@api_view("GET", failure_message="Failed to load Redis summary.", failure_data={})
def summary(request: HttpRequest, name: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_summary())
    with open_client(name) as client:
        return envelope_response(ApiResponse.ok(server_summary(client)))


# =============================================================================
# Keys
# =============================================================================


@api_view("GET", failure_message="Failed to scan keys.", failure_data=ScanPage())
def keys(request: HttpRequest, name: str) -> JsonResponse:
    mock = mock_requested(request)
    db = None if mock else parse_db(request.GET.get("db"))
    query = parse_scan_query(request.GET, db)
    return envelope_response(list_keys(name, db, query, mock=mock))


@api_view("GET", failure_message="Failed to read key info.")
def key_info(request: HttpRequest, name: str, key: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_key_info(key))
    with open_client(name, parse_db(request.GET.get("db"))) as client:
        return envelope_response(ApiResponse.ok(get_key_info(client, key)))


@api_view("GET", "POST", failure_message="Failed to access key value.", failure_data=UnknownValue())
def key_value(request: HttpRequest, name: str, key: str) -> JsonResponse:
    if request.method == "POST":
        return _write_key_value(request, name, key)
    if mock_requested(request):
        return envelope_response(mocks.mock_value())
    key_type = normalize_key_type(request.GET.get("type"))
    with open_client(name, parse_db(request.GET.get("db"))) as client:
        return envelope_response(ApiResponse.ok(read_value(client, key, key_type)))


def _write_key_value(request: HttpRequest, name: str, key: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_done("Updated"))
    try:
        body = parse_body(request)
        key_type = normalize_key_type(body.get("type"))
        expiry = parse_seconds(body.get("expirySeconds"), "expirySeconds")
        with open_client(name, parse_db(request.GET.get("db"))) as client:
            message = write_value(client, key, key_type, body.get("value"), expiry)
    except KeyBrowserError as e:
        return envelope_response(ApiResponse.fail(False, e.message, *e.reasons), e.status)  # noqa: FBT003
    except _main_exceptions as e:
        logger.exception("Error writing key '%s' on connection '%s'", key, name)
        return envelope_response(ApiResponse.fail(False, "Failed to update key.", str(e)), 500)  # noqa: FBT003
    return envelope_response(ApiResponse.ok(True, message))  # noqa: FBT003


@api_view("POST", failure_message="Failed to rename key.", failure_data=False)
def key_rename(request: HttpRequest, name: str, key: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_done("Renamed"))
    body = parse_body(request)
    with open_client(name, parse_db(request.GET.get("db"))) as client:
        rename_key(client, key, body.get("newKey"))
    return envelope_response(ApiResponse.ok(True, "Renamed."))  # noqa: FBT003


@api_view("POST", failure_message="Failed to update expiry.", failure_data=False)
def key_expire(request: HttpRequest, name: str, key: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_done("Expiry updated"))
    body = parse_body(request)
    ttl_seconds = parse_seconds(body.get("ttlSeconds"), "ttlSeconds")
    with open_client(name, parse_db(request.GET.get("db"))) as client:
        set_expiry(client, key, ttl_seconds)
    return envelope_response(ApiResponse.ok(True, "Expiry updated."))  # noqa: FBT003


@api_view("DELETE", failure_message="Failed to delete key.", failure_data=False)
def key_delete(request: HttpRequest, name: str, key: str) -> JsonResponse:
    if mock_requested(request):
        return envelope_response(mocks.mock_done("Deleted"))
    check_confirmation(request.GET.get("confirmName"), key)
    with open_client(name, parse_db(request.GET.get("db"))) as client:
        delete_key(client, key)
    return envelope_response(ApiResponse.ok(True, "Deleted."))  # noqa: FBT003


@api_view("POST", "DELETE", failure_message="Failed to flush database.", failure_data=0)
def keys_flush(request: HttpRequest, name: str) -> JsonResponse:
    # DELETE keys/flush targets a key literally named "flush"
    if request.method == "DELETE":
        return key_delete(request, name, "flush")
    if mock_requested(request):
        return envelope_response(ApiResponse.ok(0, "Database flushed (mock)."))
    check_confirmation(request.GET.get("confirmName"), name)
    with open_client(name, parse_db(request.GET.get("db"))) as client:
        flush_database(client)
    return envelope_response(ApiResponse.ok(0, "Database flushed."))
