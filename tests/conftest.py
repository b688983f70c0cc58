"""Shared test fixtures for the Better Auth client test suite."""

import json
from dataclasses import dataclass, field
from typing import Any

import pytest
from typer.testing import CliRunner

from better_auth.api.transport import TransportResponse
from better_auth.auth.session import AuthSession
from better_auth.config import ClientSettings
from better_auth.storage import MemorySecureStore, SecureTokenStore, TokenChangeNotifier

BASE_URL = "https://example.com"
API_BASE = f"{BASE_URL}/api/auth"


# ============================================================================
# Mock Response Data
# ============================================================================

AUTH_RESPONSE = {
    "success": True,
    "data": {
        "session": {"token": "abc123", "expiresAt": "2025-01-01T00:00:00Z"},
        "user": {"id": "u1", "email": "user@example.com", "name": "Test User"},
    },
}

ERROR_RESPONSE = {"error": {"code": "INVALID_CREDENTIALS", "message": "Invalid token"}}


def json_body(data: Any) -> bytes:
    return json.dumps(data).encode()


# ============================================================================
# Transport double
# ============================================================================


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None = None

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class FakeTransport:
    """Transport that records requests and replays queued responses in order."""

    requests: list[RecordedRequest] = field(default_factory=list)
    responses: list[Any] = field(default_factory=list)

    def queue(self, status: int = 200, body: Any = b"", headers: dict[str, str] | None = None) -> None:
        if not isinstance(body, bytes):
            body = json_body(body)
        self.responses.append(TransportResponse(status=status, headers=headers or {}, body=body))

    def queue_error(self, error: BaseException) -> None:
        self.responses.append(error)

    async def send(self, method, url, headers, body=None):
        self.requests.append(RecordedRequest(method, url, dict(headers), body))
        if not self.responses:
            raise AssertionError(f"No response queued for {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def base_store():
    """Token store over an in-memory secure store."""
    return SecureTokenStore(MemorySecureStore())


@pytest.fixture
def notifier():
    return TokenChangeNotifier()


@pytest.fixture
def events(notifier):
    """Events received by the shared notifier, in delivery order."""
    received = []
    notifier.subscribe(received.append)
    return received


@pytest.fixture
def client_settings():
    return ClientSettings(base_url=BASE_URL, request_timeout=5.0)


@pytest.fixture
def auth_session(transport, base_store, notifier, client_settings):
    """AuthSession wired to the fake transport and in-memory store."""
    return AuthSession(
        transport=transport,
        token_store=base_store,
        events=notifier,
        settings=client_settings,
    )


@pytest.fixture
def cli_runner():
    return CliRunner()
