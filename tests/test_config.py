"""Tests for client settings."""

from pathlib import Path

from better_auth.config import ClientSettings


class TestClientSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BETTER_AUTH_BASE_URL", raising=False)

        config = ClientSettings(_env_file=None)

        assert config.base_url == "http://localhost:3000"
        assert config.endpoint("/session") == "http://localhost:3000/api/auth/session"
        assert config.request_timeout == 30.0
        assert config.storage_key == "sessionToken"

    def test_endpoint_join(self):
        config = ClientSettings(base_url="https://example.com/", base_path="api/auth/")

        assert config.api_base == "https://example.com/api/auth"
        assert config.endpoint("sign-in/social") == "https://example.com/api/auth/sign-in/social"
        assert config.endpoint("/sign-out") == "https://example.com/api/auth/sign-out"

    def test_empty_base_path(self):
        config = ClientSettings(base_url="https://example.com", base_path="")

        assert config.endpoint("/session") == "https://example.com/session"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BETTER_AUTH_BASE_URL", "https://auth.example.com")
        monkeypatch.setenv("BETTER_AUTH_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("BETTER_AUTH_SIGN_IN_PATH", "/sign-in/id-token")

        config = ClientSettings()

        assert config.base_url == "https://auth.example.com"
        assert config.request_timeout == 2.5
        assert config.endpoint(config.sign_in_path) == "https://auth.example.com/api/auth/sign-in/id-token"

    def test_storage_dir_expands_user(self):
        config = ClientSettings(config_dir="~/.better-auth-test")

        assert config.storage_dir == Path.home() / ".better-auth-test"
