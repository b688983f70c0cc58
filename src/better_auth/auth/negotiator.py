"""Social sign-in request negotiation.

Backends disagree on how the provider token travels in a social sign-in
body: some want ``"idToken": "<jwt>"`` with string-typed options, others
``"idToken": {"token": "<jwt>", ...}`` with native option types. The
negotiator sends candidate bodies one after another until a response yields a
session, then falls back to the alternate ``{redirect, token}`` answer shape
and finally to a token carried in a response header.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from ..api.decoder import ApiFailure, DecodeFailure, EnvelopeDecoder, Ok, Result, is_success
from ..api.transport import Transport, TransportResponse
from ..errors import MissingTokenError
from ..models import (
    AuthData,
    EnvelopeSignInRequest,
    FlatSignInRequest,
    IdTokenEnvelope,
    Session,
    SignInCandidate,
    SocialSignInTokenResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_HEADER = "set-auth-token"

# Providers whose backends only accept the enveloped idToken
ENVELOPE_ONLY_PROVIDERS = frozenset({"apple"})


@dataclass
class SocialSignInOptions:
    """Optional parameters for social sign-in."""

    callback_url: str | None = None
    new_user_callback_url: str | None = None
    error_callback_url: str | None = None
    disable_redirect: bool = True
    scopes: list[str] = field(default_factory=list)
    request_sign_up: bool | None = None
    login_hint: str | None = None
    # Only sent inside the enveloped idToken
    nonce: str | None = None
    access_token: str | None = None


def _flag(value: bool | None) -> str | None:
    if value is None:
        return None
    return "true" if value else "false"


def flat_request(provider: str, token: str, options: SocialSignInOptions) -> FlatSignInRequest:
    return FlatSignInRequest(
        provider=provider,
        id_token=token,
        callback_url=options.callback_url,
        new_user_callback_url=options.new_user_callback_url,
        error_callback_url=options.error_callback_url,
        disable_redirect=_flag(options.disable_redirect),
        scopes=",".join(options.scopes) if options.scopes else None,
        request_sign_up=_flag(options.request_sign_up),
        login_hint=options.login_hint,
    )


def envelope_request(provider: str, token: str, options: SocialSignInOptions) -> EnvelopeSignInRequest:
    return EnvelopeSignInRequest(
        provider=provider,
        id_token=IdTokenEnvelope(
            token=token,
            nonce=options.nonce,
            access_token=options.access_token,
        ),
        callback_url=options.callback_url,
        new_user_callback_url=options.new_user_callback_url,
        error_callback_url=options.error_callback_url,
        disable_redirect=options.disable_redirect,
        scopes=list(options.scopes) or None,
        request_sign_up=options.request_sign_up,
        login_hint=options.login_hint,
    )


def candidate_shape(candidate: SignInCandidate) -> str:
    if isinstance(candidate, FlatSignInRequest):
        return "flat"
    if isinstance(candidate, EnvelopeSignInRequest):
        return "envelope"
    raise TypeError(f"Unknown sign-in candidate: {type(candidate).__name__}")


def _session_token(auth: AuthData | None) -> str | None:
    if auth is None or not auth.session.token.strip():
        return None
    return auth.session.token


def _synthesized(token: str, status: int) -> Ok[AuthData]:
    return Ok(AuthData(session=Session(token=token), user=None), status)


class SignInNegotiator:
    """Resolves a provider token into a backend session.

    Usage:
        negotiator = SignInNegotiator(transport, "https://example.com/api/auth/sign-in/social")
        result = await negotiator.negotiate("google", id_token)
        auth = result.unwrap()
    """

    def __init__(
        self,
        transport: Transport,
        sign_in_url: str,
        decoder: EnvelopeDecoder | None = None,
        token_header: str = DEFAULT_TOKEN_HEADER,
    ):
        self.transport = transport
        self.sign_in_url = sign_in_url
        self.decoder = decoder or EnvelopeDecoder()
        self.token_header = token_header

    def candidates(
        self,
        provider: str,
        token: str,
        options: SocialSignInOptions | None = None,
    ) -> list[SignInCandidate]:
        """Request bodies to try for ``provider``, in priority order."""
        options = options or SocialSignInOptions()
        if provider.lower() in ENVELOPE_ONLY_PROVIDERS:
            return [envelope_request(provider, token, options)]
        return [
            flat_request(provider, token, options),
            envelope_request(provider, token, options),
        ]

    async def negotiate(
        self,
        provider: str,
        token: str | None,
        options: SocialSignInOptions | None = None,
        token_key: str = "idToken",
    ) -> Result:
        """Try each candidate until one yields a session.

        Raises:
            MissingTokenError: If ``token`` is empty; no request is sent
        """
        if not token or not token.strip():
            raise MissingTokenError(f"{provider} token provider returned no token")

        responses: list[TransportResponse] = []
        last_api_failure: ApiFailure | None = None
        last_decode_failure: DecodeFailure | None = None

        candidates = self.candidates(provider, token, options)
        for attempt, candidate in enumerate(candidates, start=1):
            shape = candidate_shape(candidate)
            logger.debug(
                "Sign-in attempt %d/%d for %s (shape=%s, token_key=%s)",
                attempt, len(candidates), provider, shape, token_key,
            )
            response = await self.transport.send(
                "POST",
                self.sign_in_url,
                {"Content-Type": "application/json"},
                json.dumps(candidate.to_wire()).encode(),
            )
            responses.append(response)

            result = self.decoder.decode(response.status, response.body, AuthData)
            if isinstance(result, Ok):
                if _session_token(result.value):
                    logger.debug("Sign-in for %s resolved with %s shape", provider, shape)
                    return result
                result = DecodeFailure(response.status, response.body, "Response carried no session token")

            logger.debug("Sign-in %s shape failed for %s: %r", shape, provider, result)
            if isinstance(result, ApiFailure):
                last_api_failure = result
            else:
                last_decode_failure = result

        fallback = self._fallback(responses)
        if fallback is not None:
            return fallback

        return last_api_failure or last_decode_failure

    def _fallback(self, responses: list[TransportResponse]) -> Ok[AuthData] | None:
        """Accept a ``{redirect, token}`` body, then a header-carried token."""
        successful = [r for r in responses if is_success(r.status)]

        for response in successful:
            try:
                social = SocialSignInTokenResponse.model_validate_json(response.body)
            except ValidationError:
                continue
            if social.token and social.token.strip():
                logger.debug("Sign-in resolved from redirect/token response")
                return _synthesized(social.token, response.status)

        for response in successful:
            header_token = response.header(self.token_header)
            if header_token and header_token.strip():
                logger.debug("Sign-in resolved from %s header", self.token_header)
                return _synthesized(header_token.strip(), response.status)

        return None
