"""Key listing: scan candidates, then enrich only those keys."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django_keybrowser import mocks
from django_keybrowser.conf import get_setting
from django_keybrowser.connection import open_client
from django_keybrowser.enrich import enrich
from django_keybrowser.exceptions import _main_exceptions
from django_keybrowser.scan import get_exact, scan_exhaustive, scan_page
from django_keybrowser.types import ApiResponse, ScanPage, ScanQuery, normalize_type_filter

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

TRUNCATED_MESSAGE = "Scan stopped before the whole keyspace was read; results are partial."


def _parse_int(raw: str | None) -> int | None:
    try:
        return int(float(raw)) if raw not in (None, "") else None
    except (TypeError, ValueError, OverflowError):
        return None


def parse_page_size(raw: str | None) -> int:
    """Missing, non-numeric or non-positive sizes fall back to the default; large ones clamp."""
    default = get_setting("DEFAULT_PAGE_SIZE")
    value = _parse_int(raw)
    if value is None or value <= 0:
        return default
    return min(value, get_setting("MAX_PAGE_SIZE"))


def parse_cursor(raw: str | None) -> int:
    value = _parse_int(raw)
    if value is None or value < 0:
        return 0
    return value


def parse_scan_query(params: Mapping[str, str], db: int | None = None) -> ScanQuery:
    """Build a ``ScanQuery`` from query-string parameters."""
    pattern = (params.get("pattern") or "").strip() or "*"
    exact_key = (params.get("exactKey") or "").strip() or None
    return ScanQuery(
        pattern=pattern,
        exact_key=exact_key,
        type=normalize_type_filter(params.get("type")),
        page_size=parse_page_size(params.get("pageSize")),
        cursor=parse_cursor(params.get("cursor")),
        exhaustive=(params.get("exhaustive") or "").lower() == "true",
        db=db,
    )


def list_keys(connection_name: str, db: int | None, query: ScanQuery, *, mock: bool = False) -> ApiResponse[ScanPage]:
    """Return one enriched page of keys for ``query``.

    With ``mock`` set, a canned page is returned and no connection is
    resolved. Store errors come back as a failure envelope with an empty
    page; configuration errors (unknown connection...) propagate.
    """
    if mock:
        return mocks.mock_key_page()

    pattern = query.pattern or "*"
    try:
        with open_client(connection_name, db) as client:
            if query.exact_key:
                return ApiResponse.ok(get_exact(client, query.exact_key, query.type))
            if query.exhaustive:
                candidates = scan_exhaustive(client, pattern, query.page_size, query.type)
            else:
                candidates = scan_page(client, query.cursor, pattern, query.page_size, query.type)
            keys = enrich(client, [info.key for info in candidates.keys])
    except _main_exceptions as e:
        logger.exception("Error scanning keys on connection '%s'", connection_name)
        return ApiResponse.fail(ScanPage(), "Failed to scan keys.", str(e))

    page = ScanPage(keys=tuple(keys), cursor=candidates.cursor, truncated=candidates.truncated)
    return ApiResponse.ok(page, TRUNCATED_MESSAGE if page.truncated else "")
