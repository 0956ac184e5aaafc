"""
multisig.runtime.event_sink — buffered notification delivery.

Notifications emitted during a call are *staged*. They become observable
(appended to `history` and delivered to subscribers) only when the outermost
call commits. A call that raises drops the notifications it staged, matching
the state revert performed by the journal.

Typical use:
    sink = NotificationSink()
    sink.subscribe(lambda n: print(n.name))
    mark = sink.mark()
    sink.emit(Notification.make("Submission", tx_id=0))
    sink.truncate(mark)   # on failure
    sink.flush()          # on outermost commit
"""

from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from ..types.events import Notification

log = logging.getLogger("multisig.events")

Subscriber = Callable[[Notification], None]


class NotificationSink:
    __slots__ = ["_staged", "_history", "_subscribers"]

    def __init__(self) -> None:
        self._staged: List[Notification] = []
        self._history: List[Notification] = []
        self._subscribers: List[Subscriber] = []

    # ------------------------ subscription ------------------------

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register a callback; returns an unsubscribe function."""
        self._subscribers.append(fn)

        def _unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return _unsubscribe

    # ------------------------ staging ------------------------

    def emit(self, notification: Notification) -> int:
        """Stage a notification. Returns its index among staged entries."""
        self._staged.append(notification)
        return len(self._staged) - 1

    def mark(self) -> int:
        return len(self._staged)

    def truncate(self, marker: int) -> None:
        """Drop every notification staged since `marker`."""
        del self._staged[marker:]

    def flush(self) -> Tuple[Notification, ...]:
        """
        Publish staged notifications in order. Subscriber exceptions are logged
        and do not affect delivery to other subscribers or the committed state.
        """
        out = tuple(self._staged)
        self._staged.clear()
        self._history.extend(out)
        for n in out:
            log.debug("notification", extra={"event": n.name})
            for fn in list(self._subscribers):
                try:
                    fn(n)
                except Exception:
                    log.exception("notification subscriber failed", extra={"event": n.name})
        return out

    # ------------------------ views ------------------------

    @property
    def history(self) -> Tuple[Notification, ...]:
        return tuple(self._history)

    @property
    def staged(self) -> Tuple[Notification, ...]:
        return tuple(self._staged)

    def names(self) -> List[str]:
        return [n.name for n in self._history]

    def __len__(self) -> int:
        return len(self._history)


__all__ = ["NotificationSink", "Subscriber"]
