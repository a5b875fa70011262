"""Bounded most-recently-used set of open editor tabs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

MAX_TABS = 5


class OpenTabSet:
    """Ordered unique key names, oldest first, never longer than ``limit``."""

    def __init__(self, limit: int = MAX_TABS) -> None:
        if limit < 1:
            msg = "limit must be at least 1"
            raise ValueError(msg)
        self.limit = limit
        self._tabs: list[str] = []

    def touch(self, key: str) -> list[str]:
        """Move ``key`` to the end (adding it if new); return evicted keys."""
        if key in self._tabs:
            self._tabs.remove(key)
        self._tabs.append(key)
        evicted = self._tabs[: -self.limit] if len(self._tabs) > self.limit else []
        del self._tabs[: len(evicted)]
        return evicted

    def close(self, key: str) -> str | None:
        """Remove ``key`` and return the tab that should become active (the last one)."""
        self.discard(key)
        return self._tabs[-1] if self._tabs else None

    def discard(self, key: str) -> None:
        if key in self._tabs:
            self._tabs.remove(key)

    def clear(self) -> None:
        self._tabs.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._tabs

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tabs))

    def __len__(self) -> int:
        return len(self._tabs)

    def as_list(self) -> list[str]:
        return list(self._tabs)
