"""Wire models for Better Auth requests and responses.

The backend is inconsistent about shapes: most endpoints wrap payloads in
``{success, data, error}``, some return the payload bare, and the social
sign-in endpoint may answer with ``{redirect, token, url}`` instead. These
models describe each shape; :mod:`better_auth.api.decoder` decides which one
a response actually used.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Epoch numbers above this are milliseconds, otherwise seconds
MILLISECONDS_THRESHOLD = 10**12


def parse_timestamp(value: Any) -> Any:
    """Normalize backend timestamps to aware UTC datetimes.

    Accepts ISO-8601 strings (with or without fractional seconds, ``Z`` or an
    explicit offset) and epoch numbers in seconds or milliseconds.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise ValueError("boolean is not a timestamp")
    if isinstance(value, (int, float)):
        try:
            if not math.isfinite(value):
                raise ValueError(f"timestamp is not finite: {value!r}")
            if value > MILLISECONDS_THRESHOLD:
                return _EPOCH + timedelta(milliseconds=value)
            return _EPOCH + timedelta(seconds=value)
        except OverflowError as e:
            raise ValueError(f"timestamp out of range: {value!r}") from e
    if isinstance(value, str):
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc)
        except OverflowError as e:
            raise ValueError(f"timestamp out of range: {value!r}") from e
    raise ValueError(f"unsupported timestamp value: {value!r}")


Timestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]


class WireModel(BaseModel):
    """Base for backend payloads: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize using wire names, omitting absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class KnownErrorCode(str, Enum):
    """Error codes the backend is known to emit."""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ApiError(WireModel):
    """Error payload returned by the backend."""

    code: str | None = None
    message: str

    @property
    def known_code(self) -> KnownErrorCode | None:
        if self.code is None:
            return None
        try:
            return KnownErrorCode(self.code)
        except ValueError:
            return None


class Envelope(BaseModel, Generic[T]):
    """Generic ``{success, data, error}`` response wrapper.

    An ``error`` always wins: when present, ``data`` is not decoded and
    ``success`` is forced to ``False``. When ``data`` is present and
    ``success`` was omitted, ``success`` is derived as ``True``.
    """

    model_config = ConfigDict(extra="ignore")

    success: bool | None = None
    data: T | None = None
    error: ApiError | None = None

    @model_validator(mode="before")
    @classmethod
    def _error_takes_precedence(cls, values: Any) -> Any:
        if isinstance(values, dict) and values.get("error") is not None:
            return {"success": False, "error": values["error"]}
        return values

    @model_validator(mode="after")
    def _derive_success(self) -> "Envelope[T]":
        if self.error is not None:
            self.success = False
        elif self.success is None and self.data is not None:
            self.success = True
        return self

    @property
    def is_empty(self) -> bool:
        """True when none of success, data or error was present."""
        return self.success is None and self.data is None and self.error is None


class Session(WireModel):
    """Session returned by the backend. Only ``token`` is required."""

    token: str
    expires_at: Timestamp | None = None
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None


class User(WireModel):
    """User profile. Fields vary with provider and consent."""

    id: str
    email: str | None = None
    name: str | None = None
    provider: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None


class AuthData(WireModel):
    """Session plus, optionally, the user it belongs to."""

    session: Session
    user: User | None = None


class EmptyResponse(WireModel):
    """Payload for endpoints that only report success or error."""


class SocialSignInTokenResponse(WireModel):
    """Alternate social sign-in answer: a redirect flag and a bare token."""

    redirect: bool | None = None
    token: str | None = None
    url: str | None = None


# Request bodies


class RefreshRequest(WireModel):
    refresh_token: str | None = None


class RefreshTokenRequest(WireModel):
    provider_id: str
    account_id: str | None = None
    user_id: str | None = None


class RefreshTokenResponse(WireModel):
    """Provider tokens returned by the refresh-token endpoint."""

    access_token: str | None = None
    access_token_expires_at: Timestamp | None = None
    id_token: str | None = None
    refresh_token: str | None = None
    refresh_token_expires_at: Timestamp | None = None
    token_type: str | None = None


class IdTokenEnvelope(WireModel):
    """ID token with optional nonce and access token."""

    token: str
    nonce: str | None = None
    access_token: str | None = None


class FlatSignInRequest(WireModel):
    """Social sign-in with a string ``idToken``; every option is a string."""

    provider: str
    id_token: str
    callback_url: str | None = Field(default=None, alias="callbackURL")
    new_user_callback_url: str | None = Field(default=None, alias="newUserCallbackURL")
    error_callback_url: str | None = Field(default=None, alias="errorCallbackURL")
    disable_redirect: str | None = None
    scopes: str | None = None
    request_sign_up: str | None = None
    login_hint: str | None = None


class EnvelopeSignInRequest(WireModel):
    """Social sign-in with an ``idToken`` envelope; options keep native types."""

    provider: str
    id_token: IdTokenEnvelope
    callback_url: str | None = Field(default=None, alias="callbackURL")
    new_user_callback_url: str | None = Field(default=None, alias="newUserCallbackURL")
    error_callback_url: str | None = Field(default=None, alias="errorCallbackURL")
    disable_redirect: bool | None = None
    scopes: list[str] | None = None
    request_sign_up: bool | None = None
    login_hint: str | None = None


SignInCandidate = FlatSignInRequest | EnvelopeSignInRequest
