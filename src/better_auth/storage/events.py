"""Token change events and the subscriber list that delivers them."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenChangeEvent:
    """Stored token transition. ``new_token`` is None when the token was deleted."""

    old_token: str | None
    new_token: str | None

    @property
    def is_deletion(self) -> bool:
        return self.new_token is None


TokenChangeSink = Callable[[TokenChangeEvent], None]


class TokenChangeNotifier:
    """Fans token change events out to subscribers, in subscription order.

    Delivery is fire-and-forget: a subscriber that raises is logged and the
    remaining subscribers still receive the event.

    Usage:
        notifier = TokenChangeNotifier()
        unsubscribe = notifier.subscribe(lambda event: print(event.new_token))
        ...
        unsubscribe()
    """

    def __init__(self):
        self._subscribers: list[TokenChangeSink] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: TokenChangeSink) -> Callable[[], None]:
        """Register a callback. Returns a function that removes it again."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: TokenChangeSink) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def notify(self, event: TokenChangeEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Token change subscriber %r failed", callback)

    __call__ = notify
