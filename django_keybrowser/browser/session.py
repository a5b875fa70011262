"""One browsing session against one connection.

``KeyBrowserSession`` ties the key store, the value cache, the open tabs and
the current selection together, and implements the user actions (add, save,
rename, delete, flush) on top of a ``KeysApi``.

Invariants kept by every method:

- the selected key, when there is one, is an open tab;
- the selection is never silently moved to a different key when the
  filtered list changes; it is cleared instead.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django_keybrowser.browser.notify import NotificationPort, NullNotifier, busy
from django_keybrowser.browser.store import DEFAULT_PAGE_SIZE, KeyStore
from django_keybrowser.browser.tabs import MAX_TABS, OpenTabSet
from django_keybrowser.browser.values import ValueCache
from django_keybrowser.types import KeyType, KeyValue, StreamValue

if TYPE_CHECKING:
    from django_keybrowser.browser.api import KeysApi
    from django_keybrowser.types import ApiResponse, KeyInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of a user action; ``message`` is meant for a toast."""

    ok: bool
    message: str = ""


def parse_ttl_text(text: str) -> int | None:
    """Parse TTL input: blank means no expiry, otherwise a non-negative number of seconds.

    Raises:
        ValueError: If the text is not a non-negative number.
    """
    text = text.strip()
    if not text:
        return None
    seconds = float(text)
    if math.isnan(seconds) or math.isinf(seconds) or seconds < 0:
        msg = "TTL must be a positive number."
        raise ValueError(msg)
    return int(seconds)


def _failure_message(response: ApiResponse, default: str) -> str:
    if response.reasons:
        return response.reasons[0]
    return response.message or default


class KeyBrowserSession:
    """Client-side state of the key browser for one connection."""

    def __init__(
        self,
        api: KeysApi,
        connection_name: str,
        notifier: NotificationPort | None = None,
        *,
        db: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_tabs: int = MAX_TABS,
    ) -> None:
        self._api = api
        self.connection_name = connection_name
        self._notifier = notifier or NullNotifier()
        self.store = KeyStore(api, connection_name, self._notifier, page_size=page_size, db=db)
        self.values = ValueCache(api, connection_name, self._notifier)
        self.tabs = OpenTabSet(max_tabs)
        self.selected_key: str | None = None
        self.type_filter: KeyType | str = "all"
        self._db_sizes: dict[int, int] = {}

    @property
    def db(self) -> int | None:
        return self.store.db

    @property
    def selected_info(self) -> KeyInfo | None:
        if self.selected_key is None:
            return None
        return self.store.info.get(self.selected_key)

    @property
    def selected_value(self) -> KeyValue | None:
        if self.selected_key is None:
            return None
        return self.values.get(self.selected_key)

    # =========================================================================
    # Listing
    # =========================================================================

    async def refresh(self, **query_delta) -> bool:
        """Reload the key list (optionally with a changed query) and reconcile the selection.

        Changing ``db`` drops tabs, cached values and the selection, which all
        belong to the previous database.
        """
        if "db" in query_delta and query_delta["db"] != self.store.db:
            self.tabs.clear()
            self.values.clear()
            self.selected_key = None
        loaded = await self.store.load_keys(**query_delta)
        self.reconcile_selection()
        return loaded

    async def search(self, pattern: str) -> bool:
        return await self.refresh(pattern=pattern)

    async def switch_database(self, db: int) -> bool:
        return await self.refresh(db=db)

    async def next_page(self) -> bool:
        loaded = await self.store.next_page()
        self.reconcile_selection()
        return loaded

    async def previous_page(self) -> bool:
        loaded = await self.store.previous_page()
        self.reconcile_selection()
        return loaded

    def set_type_filter(self, type_filter: KeyType | str) -> None:
        self.type_filter = type_filter
        self.reconcile_selection()

    def filtered_keys(self) -> list[str]:
        return self.store.filtered_keys(self.type_filter)

    def type_counts(self) -> dict[str, int]:
        return self.store.type_counts(self.type_filter)

    # =========================================================================
    # Selection and tabs
    # =========================================================================

    def select_key(self, key: str | None) -> None:
        if key is None:
            self.selected_key = None
            return
        for evicted in self.tabs.touch(key):
            self.values.invalidate(evicted)
        self.selected_key = key

    def close_tab(self, key: str) -> str | None:
        """Close a tab; closing the active one activates the last remaining tab."""
        following = self.tabs.close(key)
        if self.selected_key == key:
            self.selected_key = following
        return self.selected_key

    def reconcile_selection(self, type_filter: KeyType | str | None = None) -> str | None:
        """Clear the selection when the filtered list no longer contains it."""
        if type_filter is not None:
            self.type_filter = type_filter
        if self.selected_key is not None and self.selected_key not in self.filtered_keys():
            self.selected_key = None
        return self.selected_key

    async def load_selected_value(self, force: bool = False) -> KeyValue | None:  # noqa: FBT001, FBT002
        info = self.selected_info
        if info is None:
            return None
        return await self.values.load_value(info.key, info.type, self.db, force=force)

    # =========================================================================
    # Actions
    # =========================================================================

    def add_key(self, name: str, key_type: KeyType | str) -> str | None:
        """Create a draft key and select it."""
        draft = self.store.add_draft(name, key_type)
        if draft is None:
            return None
        self.select_key(draft.key)
        return draft.key

    def change_draft_type(self, key_type: KeyType | str) -> None:
        if self.selected_key is not None and self.store.is_draft(self.selected_key):
            self.store.change_draft_type(self.selected_key, key_type)
            self.values.invalidate(self.selected_key)

    async def save(self, key: str, value: KeyValue, ttl_text: str = "") -> ActionResult:
        """Write ``value`` and, when it changed, the TTL; then promote a draft and reload."""
        if value.type is KeyType.UNKNOWN:
            return ActionResult(False, "Unsupported key type.")  # noqa: FBT003
        try:
            ttl_seconds = parse_ttl_text(ttl_text)
        except ValueError:
            return ActionResult(False, "TTL must be a positive number.")  # noqa: FBT003
        if isinstance(value, StreamValue) and not value.value:
            return ActionResult(False, "Add at least one entry to create the stream.")  # noqa: FBT003

        db = self.db
        current = self.store.info.get(key)
        with busy(self._notifier, "Saving key"):
            response = await self._api.set_value(self.connection_name, key, value, db, ttl_seconds)
        if not response.is_success:
            return ActionResult(False, _failure_message(response, "Save failed."))  # noqa: FBT003

        current_ttl = current.ttl_seconds if current is not None else None
        if ttl_seconds != current_ttl:
            with busy(self._notifier, "Updating expiry"):
                expire = await self._api.set_expiry(self.connection_name, key, ttl_seconds, db)
            if not expire.is_success:
                return ActionResult(False, _failure_message(expire, "TTL update failed."))  # noqa: FBT003

        self.store.discard_draft(key)
        await self.store.load_keys(reset_history=True, cursor=0)
        info = await self.store.refresh_key_info(key)
        if info is not None:
            await self.values.load_value(key, info.type, db, force=True)
        return ActionResult(True, f'"{key}" updated successfully.')  # noqa: FBT003

    async def rename(self, key: str, new_name: str) -> ActionResult:
        target = new_name.strip()
        if not target or target == key:
            return ActionResult(True)  # noqa: FBT003
        with busy(self._notifier, "Renaming key"):
            response = await self._api.rename_key(self.connection_name, key, target, self.db)
        if not response.is_success:
            return ActionResult(False, _failure_message(response, "Rename failed."))  # noqa: FBT003

        self.store.forget_key(key)
        self.values.invalidate(key)
        self.tabs.discard(key)
        self.select_key(target)
        await self.store.load_keys()
        await self.store.refresh_key_info(target)
        return ActionResult(True, f'Renamed to "{target}".')  # noqa: FBT003

    async def delete(self, key: str, confirm_name: str) -> ActionResult:
        """Delete ``key`` once ``confirm_name`` matches it exactly."""
        if confirm_name != key:
            return ActionResult(False, "Confirmation name does not match.")  # noqa: FBT003
        with busy(self._notifier, "Deleting key"):
            response = await self._api.delete_key(self.connection_name, key, confirm_name, self.db)
        if not response.is_success:
            return ActionResult(False, response.message or "Failed to delete key.")  # noqa: FBT003

        if self.selected_key == key:
            self.selected_key = None
        self.tabs.discard(key)
        self.values.invalidate(key)
        self.store.forget_key(key)
        self._db_sizes.pop(self.db or 0, None)
        await self.refresh()
        return ActionResult(True, f'"{key}" was removed.')  # noqa: FBT003

    async def flush(self, db: int, confirm_name: str) -> ActionResult:
        """Flush database ``db`` once ``confirm_name`` matches the connection name."""
        if db < 0:
            return ActionResult(False, "Database index must be zero or greater.")  # noqa: FBT003
        if confirm_name != self.connection_name:
            return ActionResult(False, "Confirmation name does not match.")  # noqa: FBT003
        with busy(self._notifier, "Flushing database"):
            response = await self._api.flush_database(self.connection_name, db, confirm_name)
        if not response.is_success:
            return ActionResult(False, response.message or "Failed to flush database.")  # noqa: FBT003

        self.selected_key = None
        self.tabs.clear()
        self.values.clear()
        self.store.forget_all()
        self._db_sizes.pop(db, None)
        await self.refresh()
        return ActionResult(True, f"DB {db} was cleared.")  # noqa: FBT003

    async def load_db_size(self, db: int, force: bool = False) -> int | None:  # noqa: FBT001, FBT002
        """Key count of ``db``, cached; None when it could not be read."""
        if not force and db in self._db_sizes:
            return self._db_sizes[db]
        with busy(self._notifier, "Loading database size"):
            response = await self._api.database_size(self.connection_name, db)
        if not response.is_success:
            logger.debug("Could not read size of db %d: %s", db, response.message)
            return None
        self._db_sizes[db] = response.data
        return response.data
