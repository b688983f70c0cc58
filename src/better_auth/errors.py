"""Exception hierarchy for Better Auth client operations.

Every failure surfaces as a subclass of :class:`BetterAuthError` carrying
enough structured detail (status code, raw body, backend error code) for
callers to branch on it programmatically.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ApiError

# Keep raw body excerpts in messages short
_BODY_EXCERPT = 200


def _excerpt(body: bytes | None) -> str:
    if not body:
        return ""
    return body[:_BODY_EXCERPT].decode("utf-8", errors="replace")


class BetterAuthError(Exception):
    """Base exception for Better Auth client errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class InvalidEndpointError(BetterAuthError):
    """Base URL could not be used to build request URLs."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL: {url!r}")


class NetworkError(BetterAuthError):
    """Transport-level failure (connection, protocol, timeout)."""

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class RequestTimeoutError(NetworkError):
    """Request or token fetch exceeded its deadline."""

    def __init__(self, timeout: float, cause: BaseException | None = None):
        self.timeout = timeout
        super().__init__(f"Request timed out after {timeout:g}s", cause)


class InvalidResponseError(BetterAuthError):
    """Non-2xx response whose body carried no recognizable error."""

    def __init__(self, status_code: int, body: bytes | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Invalid response: HTTP {status_code}")

    @property
    def body_excerpt(self) -> str:
        return _excerpt(self.body)


class DecodingError(BetterAuthError):
    """Successful response body matched none of the known shapes."""

    def __init__(self, reason: str, status_code: int | None = None, body: bytes | None = None):
        self.reason = reason
        self.status_code = status_code
        self.body = body
        super().__init__(f"Decoding error: {reason}")

    @property
    def body_excerpt(self) -> str:
        return _excerpt(self.body)


class ApiFailureError(BetterAuthError):
    """Backend explicitly reported an error."""

    def __init__(self, error: ApiError, status_code: int | None = None):
        self.error = error
        self.status_code = status_code
        if error.code:
            message = f"API error {error.code}: {error.message}"
        else:
            message = f"API error: {error.message}"
        super().__init__(message)

    @property
    def code(self) -> str | None:
        return self.error.code


class MissingTokenError(BetterAuthError):
    """Token provider returned an empty or absent token."""

    def __init__(self, message: str | None = None):
        super().__init__(message or "No auth token available")


class ProviderAuthorizationError(BetterAuthError):
    """External sign-in flow failed or was cancelled by the user."""

    def __init__(self, cause: BaseException, provider: str | None = None):
        self.cause = cause
        self.provider = provider
        label = f"{provider} sign-in" if provider else "Provider sign-in"
        super().__init__(f"{label} failed: {cause}")


class StorageError(BetterAuthError):
    """Secure store operation failed."""

    def __init__(self, status: int | str, message: str | None = None):
        self.status = status
        detail = f"{message} ({status})" if message else str(status)
        super().__init__(f"Storage error: {detail}")
