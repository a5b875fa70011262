"""Client-side key store: paged key names, draft keys and cursor history.

Two layers make up what the browser shows:

- the authoritative info map, filled from enriched server pages and only
  ever extended or overwritten key by key, and
- the draft overlay, keys created locally that do not exist on the server.

``merge_key_names`` and ``merge_key_info`` compose them; drafts win on a
name collision.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import Counter
from typing import TYPE_CHECKING, Any

from django_keybrowser.browser.notify import NotificationPort, NullNotifier, busy
from django_keybrowser.types import KeyInfo, KeyType, ScanPage, ScanQuery, normalize_key_type, normalize_type_filter

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from django_keybrowser.browser.api import KeysApi

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

# Fields whose change starts a new listing from cursor 0
_QUERY_IDENTITY = ("pattern", "exact_key", "type", "db", "exhaustive")


def merge_key_names(drafts: Iterable[str], page_keys: Iterable[str]) -> list[str]:
    """Drafts first, then page keys, without duplicates."""
    return list(dict.fromkeys([*drafts, *page_keys]))


def merge_key_info(authoritative: Mapping[str, KeyInfo], overlay: Mapping[str, KeyInfo]) -> dict[str, KeyInfo]:
    """Overlay entries replace authoritative ones with the same name."""
    return {**authoritative, **overlay}


class CursorHistory:
    """Stack of cursors of the pages left behind by ``next_page``."""

    def __init__(self) -> None:
        self._stack: list[int] = []

    def push(self, cursor: int) -> None:
        self._stack.append(cursor)

    def pop(self) -> int | None:
        return self._stack.pop() if self._stack else None

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)

    def __bool__(self) -> bool:
        return bool(self._stack)


class KeyStore:
    """Paged key listing for one connection, merged with local drafts.

    Every ``load_keys`` call takes a sequence number; a response that arrives
    after a newer request was issued is dropped, so a slow answer for an old
    pattern never replaces the current one.
    """

    def __init__(
        self,
        api: KeysApi,
        connection_name: str,
        notifier: NotificationPort | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        db: int = 0,
    ) -> None:
        self._api = api
        self.connection_name = connection_name
        self._notifier = notifier or NullNotifier()
        self._query = ScanQuery(pattern="*", page_size=page_size, db=db)
        self._history = CursorHistory()
        self._page = ScanPage()
        self._info: dict[str, KeyInfo] = {}
        self._drafts: dict[str, KeyInfo] = {}
        self._seq = 0
        self._error: str | None = None
        self._reasons: list[str] = []
        self._is_loading = False

    # =========================================================================
    # Loading and paging
    # =========================================================================

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _apply_delta(self, query_delta: dict[str, Any]) -> ScanQuery:
        if "type" in query_delta:
            raw = query_delta["type"]
            query_delta["type"] = raw if raw is None or isinstance(raw, KeyType) else normalize_type_filter(raw)
        if "pattern" in query_delta:
            query_delta["pattern"] = (query_delta["pattern"] or "").strip() or "*"
        return dataclasses.replace(self._query, **query_delta)

    async def load_keys(self, reset_history: bool = False, **query_delta: Any) -> bool:  # noqa: FBT001, FBT002
        """Load a page for the current query updated with ``query_delta``.

        Changing pattern, exact key, type, db or exhaustive mode resets the
        cursor history and restarts at cursor 0. Changing db also drops all
        drafts. Returns False when the response failed or was stale.
        """
        previous = self._query
        query = self._apply_delta(dict(query_delta))
        if any(getattr(query, f) != getattr(previous, f) for f in _QUERY_IDENTITY):
            reset_history = True
            if "cursor" not in query_delta:
                query = dataclasses.replace(query, cursor=0)
        if query.db != previous.db:
            self._drafts.clear()
        if reset_history:
            self._history.clear()

        self._query = query
        seq = self._next_seq()
        self._is_loading = True
        try:
            with busy(self._notifier, "Loading keys"):
                response = await self._api.list_keys(self.connection_name, query)
        finally:
            if seq == self._seq:
                self._is_loading = False

        if seq != self._seq:
            logger.debug("Dropping stale key page (request %d, latest %d)", seq, self._seq)
            return False

        if not response.is_success:
            self._page = ScanPage()
            self._error = response.message or "Unable to load keys"
            self._reasons = list(response.reasons)
            return False

        self._page = response.data
        self._error = None
        self._reasons = []
        for info in self._page.keys:
            self._info[info.key] = info
        return True

    async def next_page(self) -> bool:
        if not self.has_next_page:
            return False
        self._history.push(self._query.cursor)
        return await self.load_keys(cursor=self._page.cursor)

    async def previous_page(self) -> bool:
        cursor = self._history.pop()
        if cursor is None:
            return False
        return await self.load_keys(cursor=cursor)

    async def refresh_key_info(self, key: str) -> KeyInfo | None:
        """Re-read type and TTL for ``key`` and store them in the info map."""
        with busy(self._notifier, "Loading key info"):
            response = await self._api.get_key_info(self.connection_name, key, self._query.db)
        if not response.is_success or response.data is None:
            return None
        self._info[key] = response.data
        return response.data

    def forget_key(self, key: str) -> None:
        """Drop everything known locally about ``key``."""
        self._info.pop(key, None)
        self._drafts.pop(key, None)
        if any(info.key == key for info in self._page.keys):
            self._page = dataclasses.replace(self._page, keys=tuple(i for i in self._page.keys if i.key != key))

    def forget_all(self) -> None:
        self._info.clear()
        self._drafts.clear()
        self._page = ScanPage()

    # =========================================================================
    # Drafts
    # =========================================================================

    def add_draft(self, name: str, key_type: KeyType | str) -> KeyInfo | None:
        """Create a draft key; the newest draft is listed first."""
        name = name.strip()
        if not name:
            return None
        draft = KeyInfo(name, normalize_key_type(key_type), None)
        self._drafts = {name: draft, **{k: v for k, v in self._drafts.items() if k != name}}
        return draft

    def change_draft_type(self, name: str, key_type: KeyType | str) -> None:
        if name in self._drafts:
            self._drafts[name] = dataclasses.replace(self._drafts[name], type=normalize_key_type(key_type))

    def discard_draft(self, name: str) -> None:
        self._drafts.pop(name, None)

    def is_draft(self, name: str) -> bool:
        return name in self._drafts

    @property
    def drafts(self) -> list[str]:
        return list(self._drafts)

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def query(self) -> ScanQuery:
        return self._query

    @property
    def db(self) -> int | None:
        return self._query.db

    @property
    def keys(self) -> list[str]:
        return merge_key_names(self._drafts, (info.key for info in self._page.keys))

    @property
    def info(self) -> dict[str, KeyInfo]:
        return merge_key_info(self._info, self._drafts)

    @property
    def cursor(self) -> int:
        return self._page.cursor

    @property
    def truncated(self) -> bool:
        return self._page.truncated

    @property
    def has_next_page(self) -> bool:
        return self._page.cursor != 0

    @property
    def has_previous_page(self) -> bool:
        return bool(self._history)

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def reasons(self) -> list[str]:
        return list(self._reasons)

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def filtered_keys(self, type_filter: KeyType | str | None = None) -> list[str]:
        """Merged key names, limited to ``type_filter`` (None or "all" keeps everything)."""
        wanted = None if type_filter in (None, "all") else normalize_type_filter(str(type_filter))
        if wanted is None:
            return self.keys
        info = self.info
        return [key for key in self.keys if key in info and info[key].type is wanted]

    def type_counts(self, type_filter: KeyType | str | None = None) -> dict[str, int]:
        """Count keys per type over the filtered list, plus an ``all`` total."""
        info = self.info
        keys = self.filtered_keys(type_filter)
        counts = Counter(str(info[key].type) if key in info else str(KeyType.UNKNOWN) for key in keys)
        return {"all": len(keys), **counts}
