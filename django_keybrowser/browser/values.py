"""Lazily loaded key values, cached per key and type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django_keybrowser.browser.notify import NotificationPort, NullNotifier, busy
from django_keybrowser.types import KeyType, KeyValue, normalize_key_type

if TYPE_CHECKING:
    from django_keybrowser.browser.api import KeysApi

logger = logging.getLogger(__name__)


class ValueCache:
    """Values of opened keys for one connection.

    A cached value is reused while its type matches the requested one.
    Requests are numbered from one counter and the latest number is kept per
    key; a response is kept only if it is still the latest for its key.
    """

    def __init__(self, api: KeysApi, connection_name: str, notifier: NotificationPort | None = None) -> None:
        self._api = api
        self.connection_name = connection_name
        self._notifier = notifier or NullNotifier()
        self._values: dict[str, KeyValue] = {}
        self._seq: dict[str, int] = {}
        self._counter = 0
        self.errors: dict[str, str] = {}

    def get(self, key: str) -> KeyValue | None:
        return self._values.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    async def load_value(
        self,
        key: str,
        key_type: KeyType | str,
        db: int | None = None,
        force: bool = False,  # noqa: FBT001, FBT002
    ) -> KeyValue | None:
        """Return the value of ``key``, fetching it unless a same-typed copy is cached."""
        key_type = normalize_key_type(key_type)
        cached = self._values.get(key)
        if not force and cached is not None and cached.type is key_type:
            return cached
        if key_type is KeyType.UNKNOWN:
            return None

        self._counter += 1
        seq = self._counter
        self._seq[key] = seq
        with busy(self._notifier, "Loading value"):
            response = await self._api.get_value(self.connection_name, key, key_type, db)

        if self._seq.get(key) != seq:
            logger.debug("Dropping stale value for '%s' (request %d)", key, seq)
            return self._values.get(key)
        if not response.is_success:
            self.errors[key] = response.message or "Unable to load value"
            return self._values.get(key)

        self.errors.pop(key, None)
        self._values[key] = response.data
        return response.data

    def invalidate(self, key: str) -> None:
        """Forget ``key``; an in-flight response for it is dropped too."""
        self._values.pop(key, None)
        self.errors.pop(key, None)
        self._seq.pop(key, None)

    def clear(self) -> None:
        self._seq.clear()
        self._values.clear()
        self.errors.clear()
