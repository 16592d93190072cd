"""Session invalidation broadcast.

Emitted once when a refresh fails so the UI shell can log the user out.
Listeners take no arguments; the event carries no payload.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

SESSION_INVALIDATED = "auth:logout"

Listener = Callable[[], None]


class SessionSignal:
    """Named observer list with explicit subscribe/unsubscribe."""

    def __init__(self, name: str = SESSION_INVALIDATED) -> None:
        self.name = name
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit(self) -> None:
        """Call every listener synchronously, in subscription order."""
        logger.info("Emitting %s to %d listener(s)", self.name, len(self._listeners))
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Listener for %s raised", self.name)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


_signals: dict[str, SessionSignal] = {}


def get_signal(name: str = SESSION_INVALIDATED) -> SessionSignal:
    """Process-wide signal for a topic, created on first use."""
    if name not in _signals:
        _signals[name] = SessionSignal(name)
    return _signals[name]


def default_signal() -> SessionSignal:
    """The signal shared by every client that is not given its own."""
    return get_signal(SESSION_INVALIDATED)
