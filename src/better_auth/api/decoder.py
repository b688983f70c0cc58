"""Response envelope decoder.

Turns a raw status code and body into one of three results:

- ``Ok(value)``: the backend returned a usable payload (possibly ``None``);
- ``ApiFailure(error)``: the backend explicitly reported an error;
- ``DecodeFailure``: no known shape matched; carries the raw status and body.

Shapes are tried in order: for non-2xx statuses, ``{error: {...}}`` then a
bare ``{code, message}``; for 2xx statuses, the ``{success, data, error}``
envelope, then the bare payload. A 2xx object whose ``error`` is present but
not a valid error payload is a ``DecodeFailure``, never a bare success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..errors import ApiFailureError, DecodingError, InvalidResponseError
from ..models import ApiError, Envelope

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_success(status: int) -> bool:
    return 200 <= status <= 299


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Decoded payload."""

    value: T | None
    status: int = 200

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T | None:
        return self.value


@dataclass(frozen=True)
class ApiFailure:
    """Error reported by the backend."""

    error: ApiError
    status: int

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ApiFailureError(self.error, self.status)


@dataclass(frozen=True)
class DecodeFailure:
    """Response matched none of the known shapes."""

    status: int
    body: bytes = field(repr=False)
    reason: str

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        if is_success(self.status):
            raise DecodingError(self.reason, self.status, self.body)
        raise InvalidResponseError(self.status, self.body)


Result = Union[Ok[T], ApiFailure, DecodeFailure]


class _ErrorEnvelope(BaseModel):
    error: ApiError


class _ErrorKey(BaseModel):
    error: Any = None


def _has_error_key(body: bytes) -> bool:
    """True when the body is an object with a non-null top-level ``error``."""
    try:
        return _ErrorKey.model_validate_json(body).error is not None
    except ValidationError:
        return False


@lru_cache(maxsize=None)
def _adapter(payload_type: Any) -> TypeAdapter:
    return TypeAdapter(payload_type)


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{exc.title}: {location}: {first.get('msg', 'invalid')}"


class EnvelopeDecoder:
    """Decodes backend responses into :data:`Result` values.

    Usage:
        decoder = EnvelopeDecoder()
        result = decoder.decode(200, b'{"data": {"session": {"token": "t"}}}', AuthData)
        auth = result.unwrap()
    """

    def decode(self, status: int, body: bytes, payload_type: Any = dict[str, Any]) -> Result:
        """Decode a response body received with ``status``.

        Args:
            status: HTTP status code
            body: Raw response body
            payload_type: Type of the ``data`` payload (pydantic model or any
                type pydantic can validate)

        Returns:
            Ok, ApiFailure or DecodeFailure. Never Ok for non-2xx statuses.
        """
        if not is_success(status):
            return self.decode_error(status, body)

        try:
            envelope = Envelope[payload_type].model_validate_json(body)
        except ValidationError as e:
            logger.debug("Envelope shape rejected (HTTP %d): %s", status, _describe(e))
            envelope = None

        if envelope is not None and not envelope.is_empty:
            if envelope.error is not None:
                logger.debug("Envelope carried error code=%s", envelope.error.code)
                return ApiFailure(envelope.error, status)
            return Ok(envelope.data, status)

        if envelope is None and _has_error_key(body):
            reason = "Response carried an unrecognizable error"
            logger.debug("%s (HTTP %d)", reason, status)
            return DecodeFailure(status, body, reason)

        try:
            value = _adapter(payload_type).validate_json(body)
        except ValidationError as e:
            reason = _describe(e)
            logger.debug("Bare payload shape rejected (HTTP %d): %s", status, reason)
            return DecodeFailure(status, body, f"Unable to decode response: {reason}")

        return Ok(value, status)

    def decode_error(self, status: int, body: bytes) -> ApiFailure | DecodeFailure:
        """Interpret an error response as ``{error: ...}`` or a bare ``ApiError``."""
        for shape in (_ErrorEnvelope, ApiError):
            try:
                parsed = shape.model_validate_json(body)
            except ValidationError:
                continue
            error = parsed.error if isinstance(parsed, _ErrorEnvelope) else parsed
            return ApiFailure(error, status)

        return DecodeFailure(status, body, f"HTTP {status} without a recognizable error body")
