"""Session token stores.

:class:`SecureTokenStore` keeps the single session token under one key of a
:class:`~better_auth.storage.secure.SecureStore`. :class:`ObservableTokenStore`
wraps any token store and reports every change to an injected event sink.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from .events import TokenChangeEvent, TokenChangeNotifier, TokenChangeSink
from .secure import SecureStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "sessionToken"


@runtime_checkable
class TokenStore(Protocol):
    """Read/write access to the stored session token."""

    def store(self, token: str) -> None:
        """Store a token, replacing any existing one."""
        ...

    def retrieve(self) -> str | None:
        """Return the stored token, if any."""
        ...

    def delete(self) -> None:
        """Remove the stored token. Idempotent."""
        ...


class SecureTokenStore:
    """Token store backed by one key of a secure store."""

    def __init__(self, secure_store: SecureStore, key: str = DEFAULT_STORAGE_KEY):
        self.secure_store = secure_store
        self.key = key

    def store(self, token: str) -> None:
        self.secure_store.set(self.key, token)

    def retrieve(self) -> str | None:
        return self.secure_store.get(self.key)

    def delete(self) -> None:
        self.secure_store.delete(self.key)


class ObservableTokenStore:
    """Token store decorator that emits a :class:`TokenChangeEvent` per mutation.

    Each mutation snapshots the previous value, delegates, then emits, all
    under one lock, so concurrent mutations never report a stale old value.
    Events fire only after the wrapped write succeeded. ``delete`` always
    emits, even when nothing was stored. Reads never emit.

    Usage:
        notifier = TokenChangeNotifier()
        store = ObservableTokenStore(SecureTokenStore(MemorySecureStore()), notifier)
        notifier.subscribe(on_change)
        store.store("token")  # on_change(TokenChangeEvent(None, "token"))
    """

    def __init__(self, base: TokenStore, sink: TokenChangeSink | None = None):
        """Initialize the observable store.

        Args:
            base: Store that actually persists the token
            sink: Receives events; a private notifier is created when omitted
        """
        self.base = base
        self.sink = sink if sink is not None else TokenChangeNotifier()
        self._lock = threading.RLock()

    def store(self, token: str) -> None:
        with self._lock:
            old = self.base.retrieve()
            self.base.store(token)
            self._emit(TokenChangeEvent(old_token=old, new_token=token))

    def retrieve(self) -> str | None:
        return self.base.retrieve()

    def delete(self) -> None:
        with self._lock:
            old = self.base.retrieve()
            self.base.delete()
            self._emit(TokenChangeEvent(old_token=old, new_token=None))

    def _emit(self, event: TokenChangeEvent) -> None:
        logger.debug(
            "Token changed (had_token=%s, deleted=%s)",
            event.old_token is not None,
            event.is_deletion,
        )
        self.sink(event)
