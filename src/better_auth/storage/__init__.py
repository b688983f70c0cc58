"""Credential storage and token change notification."""

from .events import TokenChangeEvent, TokenChangeNotifier, TokenChangeSink
from .secure import FileSecureStore, MemorySecureStore, SecureStore
from .tokens import ObservableTokenStore, SecureTokenStore, TokenStore

__all__ = [
    "SecureStore",
    "MemorySecureStore",
    "FileSecureStore",
    "TokenStore",
    "SecureTokenStore",
    "ObservableTokenStore",
    "TokenChangeEvent",
    "TokenChangeNotifier",
    "TokenChangeSink",
]
