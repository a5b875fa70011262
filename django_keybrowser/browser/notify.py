"""Busy/done notifications around browser-side API requests.

The session layer never reaches into global UI state; it calls a
``NotificationPort`` it was given. A host wires this to whatever loader or
toast mechanism it has.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


@runtime_checkable
class NotificationPort(Protocol):
    """Receives one ``notify_done`` for every ``notify_busy``."""

    def notify_busy(self, label: str) -> None: ...

    def notify_done(self) -> None: ...


class NullNotifier:
    """Discards every notification."""

    def notify_busy(self, label: str) -> None:
        pass

    def notify_done(self) -> None:
        pass


class LoggingNotifier:
    """Logs busy/idle transitions at debug level.

    Overlapping requests are reference counted: only the first ``notify_busy``
    and the last matching ``notify_done`` are logged as transitions.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger
        self.pending = 0

    @property
    def is_busy(self) -> bool:
        return self.pending > 0

    def notify_busy(self, label: str) -> None:
        self.pending += 1
        if self.pending == 1:
            self._log.debug("Busy: %s", label)
        else:
            self._log.debug("Busy: %s (%d pending)", label, self.pending)

    def notify_done(self) -> None:
        if self.pending == 0:
            return
        self.pending -= 1
        if self.pending == 0:
            self._log.debug("Idle")


@contextlib.contextmanager
def busy(notifier: NotificationPort, label: str) -> Iterator[None]:
    """Bracket a request with ``notify_busy``/``notify_done``, even on error."""
    notifier.notify_busy(label)
    try:
        yield
    finally:
        notifier.notify_done()
