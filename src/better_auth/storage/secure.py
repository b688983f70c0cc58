"""Secure key/value storage backends.

Stores credentials in ~/.better-auth/ with restrictive file permissions.

Note: Values are stored in plaintext and protected by file permissions (0o600).
Deployments that need encryption at rest should plug in their own
:class:`SecureStore` (keyring, secrets manager, OS keychain).
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..errors import StorageError

logger = logging.getLogger(__name__)

# Default storage directory
DEFAULT_CONFIG_DIR = Path.home() / ".better-auth"


@runtime_checkable
class SecureStore(Protocol):
    """Key/value persistence for credential strings.

    Implementations raise :class:`StorageError` when the backend fails.
    Deleting a missing key is not an error.
    """

    def set(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> str | None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemorySecureStore:
    """Process-local store, for tests and short-lived clients."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class FileSecureStore:
    """JSON file store with 0o600 permissions.

    Every call does blocking file I/O under a thread lock. AuthSession reads
    the token on the event loop before each request, which is fine for CLI
    and script-sized clients; a server handling many concurrent sessions
    should plug in a non-blocking :class:`SecureStore`.

    Usage:
        store = FileSecureStore()
        store.set("sessionToken", token)
        token = store.get("sessionToken")
    """

    def __init__(self, config_dir: Path | str | None = None, filename: str = "tokens.json"):
        """Initialize file storage.

        Args:
            config_dir: Directory for the credential file (default: ~/.better-auth)
            filename: Name of the JSON file inside ``config_dir``
        """
        self.config_dir = Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR
        self.tokens_file = self.config_dir / filename
        self._lock = threading.Lock()

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(e.errno or "mkdir", f"Could not create {self.config_dir}") from e

    def _load(self) -> dict[str, str]:
        if not self.tokens_file.exists():
            return {}

        try:
            with open(self.tokens_file) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring unreadable credential file %s: %s", self.tokens_file, e)
            return {}
        except OSError as e:
            raise StorageError(e.errno or "read", f"Could not read {self.tokens_file}") from e

        if not isinstance(data, dict):
            logger.warning("Ignoring credential file %s: expected a JSON object", self.tokens_file)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        tmp_file = self.tokens_file.with_suffix(".tmp")
        try:
            fd = os.open(tmp_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_file, self.tokens_file)
            # Set restrictive permissions
            os.chmod(self.tokens_file, 0o600)
        except OSError as e:
            raise StorageError(e.errno or "write", f"Could not write {self.tokens_file}") from e

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._load().get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key not in data:
                return
            del data[key]
            self._save(data)
