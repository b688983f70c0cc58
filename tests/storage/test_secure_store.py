"""Tests for secure store backends."""

import json
import os
import stat
from unittest.mock import patch

import pytest

from better_auth.errors import StorageError
from better_auth.storage import FileSecureStore, MemorySecureStore, SecureStore


class TestMemorySecureStore:
    def test_initial_values(self):
        store = MemorySecureStore({"sessionToken": "abc"})

        assert store.get("sessionToken") == "abc"
        assert isinstance(store, SecureStore)

    def test_delete_missing_key(self):
        store = MemorySecureStore()

        store.delete("missing")

        assert store.get("missing") is None


class TestFileSecureStore:
    """JSON file persistence."""

    @pytest.fixture
    def store(self, tmp_path):
        """Create a FileSecureStore in a temporary directory."""
        return FileSecureStore(config_dir=tmp_path)

    def test_set_and_get(self, store):
        store.set("sessionToken", "abc123")

        assert store.get("sessionToken") == "abc123"

    def test_file_permissions(self, store):
        """Should write the credential file with 0o600."""
        store.set("sessionToken", "abc123")

        mode = stat.S_IMODE(os.stat(store.tokens_file).st_mode)
        assert mode == 0o600

    def test_file_contents(self, store):
        store.set("sessionToken", "abc123")
        store.set("other", "x")

        with open(store.tokens_file) as f:
            assert json.load(f) == {"sessionToken": "abc123", "other": "x"}

    def test_persists_across_instances(self, tmp_path):
        FileSecureStore(config_dir=tmp_path).set("sessionToken", "abc123")

        assert FileSecureStore(config_dir=tmp_path).get("sessionToken") == "abc123"

    def test_delete(self, store):
        store.set("sessionToken", "abc123")
        store.set("other", "x")

        store.delete("sessionToken")

        assert store.get("sessionToken") is None
        assert store.get("other") == "x"

    def test_delete_missing_key(self, store):
        store.delete("sessionToken")

        assert not store.tokens_file.exists()

    def test_get_without_file(self, store):
        assert store.get("sessionToken") is None

    def test_corrupt_file_is_ignored(self, store):
        store.tokens_file.write_text("{not json")

        assert store.get("sessionToken") is None

        store.set("sessionToken", "abc123")
        assert store.get("sessionToken") == "abc123"

    def test_non_object_file_is_ignored(self, store):
        store.tokens_file.write_text('["abc"]')

        assert store.get("sessionToken") is None

    def test_creates_config_dir(self, tmp_path):
        config_dir = tmp_path / "nested" / "dir"

        FileSecureStore(config_dir=config_dir)

        assert config_dir.is_dir()

    def test_write_failure_raises_storage_error(self, store):
        with patch("os.replace", side_effect=OSError(28, "No space left on device")):
            with pytest.raises(StorageError) as exc_info:
                store.set("sessionToken", "abc123")

        assert exc_info.value.status == 28
        assert store.get("sessionToken") is None
