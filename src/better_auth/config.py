"""Client configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    base_url: str = "http://localhost:3000"
    base_path: str = "/api/auth"

    # Endpoint paths, relative to base_url + base_path
    session_path: str = "/session"
    sign_in_path: str = "/sign-in/social"
    sign_out_path: str = "/sign-out"
    refresh_path: str = "/refresh"
    refresh_token_path: str = "/refresh-token"

    request_timeout: float = 30.0
    # Response header some backends use to hand out the session token
    token_header: str = "set-auth-token"

    storage_key: str = "sessionToken"
    config_dir: str = "~/.better-auth"

    model_config = {"env_prefix": "BETTER_AUTH_", "env_file": ".env", "extra": "ignore"}

    @property
    def api_base(self) -> str:
        base_path = self.base_path.strip("/")
        root = self.base_url.rstrip("/")
        return f"{root}/{base_path}" if base_path else root

    def endpoint(self, path: str) -> str:
        return f"{self.api_base}/{path.lstrip('/')}"

    @property
    def storage_dir(self) -> Path:
        return Path(self.config_dir).expanduser()


settings = ClientSettings()
