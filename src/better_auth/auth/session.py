"""Client-facing Better Auth session API.

Composes the transport, the envelope decoder, the sign-in negotiator and the
observable token store, and owns the persistence policy: a successful
session-bearing response stores its token; a successful sign-out deletes it.
The store is only touched after a response was fully decoded, so failed or
cancelled operations leave it unchanged.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

import httpx

from ..api.decoder import EnvelopeDecoder, is_success
from ..api.transport import HttpxTransport, Transport, TransportResponse
from ..config import ClientSettings, settings as default_settings
from ..errors import (
    BetterAuthError,
    DecodingError,
    InvalidEndpointError,
    ProviderAuthorizationError,
    RequestTimeoutError,
)
from ..models import AuthData, EmptyResponse, RefreshRequest, RefreshTokenRequest, RefreshTokenResponse
from ..storage.events import TokenChangeNotifier, TokenChangeSink
from ..storage.secure import FileSecureStore
from ..storage.tokens import ObservableTokenStore, SecureTokenStore, TokenStore
from .negotiator import SignInNegotiator, SocialSignInOptions
from .providers import TokenProvider

logger = logging.getLogger(__name__)


def validate_base_url(url: str) -> httpx.URL:
    """Parse ``url`` and require an absolute http(s) location.

    Raises:
        InvalidEndpointError: If the URL is malformed, relative or not http(s)
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidEndpointError(url) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidEndpointError(url)
    return parsed


class _AuthorizedTransport:
    """Adds default headers, the bearer credential and the request deadline."""

    def __init__(self, session: "AuthSession"):
        self._session = session

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None = None,
    ) -> TransportResponse:
        request_headers = {"Accept": "application/json", **headers}
        token = self._session.token_store.retrieve()
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        timeout = self._session.settings.request_timeout
        try:
            return await asyncio.wait_for(
                self._session.transport.send(method, url, request_headers, body),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(timeout, e) from e


class AuthSession:
    """Better Auth client session.

    Usage:
        async with AuthSession("https://your-server.com") as auth:
            data = await auth.sign_in_with_id_token("google", id_token)
            print(data.session.token)

            auth.events.subscribe(lambda event: print("token changed"))
            await auth.sign_out()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        transport: Transport | None = None,
        token_store: TokenStore | None = None,
        events: TokenChangeSink | None = None,
        settings: ClientSettings | None = None,
        decoder: EnvelopeDecoder | None = None,
    ):
        """Create a session client.

        Args:
            base_url: Backend root (e.g. "https://your-server.com"); overrides settings
            transport: Request sender (default: httpx, closed with the session)
            token_store: Token persistence (default: ~/.better-auth file store);
                wrapped in an ObservableTokenStore unless it already is one
            events: Sink for token change events (default: a new TokenChangeNotifier);
                an ObservableTokenStore brings its own sink instead
            settings: Paths, timeout and storage settings
            decoder: Response decoder

        Raises:
            InvalidEndpointError: If the base URL is not an absolute http(s) URL
            ValueError: If ``events`` is given along with an ObservableTokenStore
                that uses a different sink
        """
        resolved = settings or default_settings
        if base_url is not None:
            resolved = resolved.model_copy(update={"base_url": base_url})
        validate_base_url(resolved.base_url)
        self.settings = resolved

        if isinstance(token_store, ObservableTokenStore):
            if events is not None and events is not token_store.sink:
                raise ValueError("events cannot be given with an ObservableTokenStore; it already has a sink")
            self.token_store = token_store
            self.events = token_store.sink
        else:
            self.events = events if events is not None else TokenChangeNotifier()
            base_store = token_store or SecureTokenStore(
                FileSecureStore(resolved.storage_dir), key=resolved.storage_key
            )
            self.token_store = ObservableTokenStore(base_store, self.events)

        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpxTransport(timeout=resolved.request_timeout)
        self.decoder = decoder or EnvelopeDecoder()
        self._sender = _AuthorizedTransport(self)
        self.negotiator = SignInNegotiator(
            self._sender,
            resolved.endpoint(resolved.sign_in_path),
            decoder=self.decoder,
            token_header=resolved.token_header,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self) -> None:
        """Close the transport if this session created it."""
        if self._owns_transport and isinstance(self.transport, HttpxTransport):
            await self.transport.close()

    @property
    def current_token(self) -> str | None:
        """The stored bearer token, if any."""
        return self.token_store.retrieve()

    def subscribe(self, callback: TokenChangeSink):
        """Subscribe to token changes when the event sink is a notifier."""
        if not isinstance(self.events, TokenChangeNotifier):
            raise TypeError("Event sink does not support subscriptions")
        return self.events.subscribe(callback)

    # Operations

    async def get_session(self) -> AuthData | None:
        """Fetch the current session. Stores the returned token, if any.

        Returns:
            AuthData, or None when the backend reports no active session
        """
        response = await self._request("GET", self.settings.session_path)
        auth = self.decoder.decode(response.status, response.body, AuthData).unwrap()
        if auth is not None and auth.session.token:
            self._persist(auth.session.token)
        return auth

    async def sign_in(
        self,
        provider_name: str,
        provider: TokenProvider,
        options: SocialSignInOptions | None = None,
    ) -> AuthData:
        """Sign in with a token produced by ``provider``.

        Raises:
            ProviderAuthorizationError: If the provider flow fails
            MissingTokenError: If the provider returns no token
        """
        token = await self._fetch_provider_token(provider_name, provider)
        return await self.sign_in_with_id_token(
            provider_name, token, options, token_key=provider.token_key
        )

    async def sign_in_with_id_token(
        self,
        provider_name: str,
        id_token: str,
        options: SocialSignInOptions | None = None,
        token_key: str = "idToken",
    ) -> AuthData:
        """Exchange an existing provider token for a session and store it."""
        result = await self.negotiator.negotiate(provider_name, id_token, options, token_key=token_key)
        auth: AuthData = result.unwrap()
        self._persist(auth.session.token)
        return auth

    async def sign_out(self) -> None:
        """Sign out on the server, then delete the local token."""
        response = await self._request("POST", self.settings.sign_out_path)
        if not (is_success(response.status) and not response.body.strip()):
            self.decoder.decode(response.status, response.body, EmptyResponse).unwrap()
        self.token_store.delete()
        logger.info("Signed out; session token deleted")

    async def refresh(self, refresh_token: str | None = None) -> AuthData:
        """Refresh the session and store the new token.

        Raises:
            DecodingError: If the response carries no session
        """
        response = await self._request(
            "POST",
            self.settings.refresh_path,
            RefreshRequest(refresh_token=refresh_token).to_wire(),
        )
        auth = self.decoder.decode(response.status, response.body, AuthData).unwrap()
        if auth is None or not auth.session.token:
            raise DecodingError("Refresh response carried no session", response.status, response.body)
        self._persist(auth.session.token)
        return auth

    async def refresh_token(
        self,
        provider_id: str,
        account_id: str | None = None,
        user_id: str | None = None,
    ) -> RefreshTokenResponse:
        """Refresh the provider's OAuth tokens. Does not touch the session token."""
        response = await self._request(
            "POST",
            self.settings.refresh_token_path,
            RefreshTokenRequest(provider_id=provider_id, account_id=account_id, user_id=user_id).to_wire(),
        )
        tokens = self.decoder.decode(response.status, response.body, RefreshTokenResponse).unwrap()
        if tokens is None:
            raise DecodingError("Refresh-token response carried no tokens", response.status, response.body)
        return tokens

    # Private helpers

    async def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> TransportResponse:
        headers: dict[str, str] = {}
        body = None
        if payload is not None:
            headers["Content-Type"] = "application/json"
            body = json.dumps(payload).encode()
        return await self._sender.send(method, self.settings.endpoint(path), headers, body)

    async def _fetch_provider_token(self, provider_name: str, provider: TokenProvider) -> str:
        timeout = self.settings.request_timeout
        try:
            return await asyncio.wait_for(provider.fetch_token(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(timeout, e) from e
        except BetterAuthError:
            raise
        except Exception as e:
            raise ProviderAuthorizationError(e, provider=provider_name) from e

    def _persist(self, token: str) -> None:
        self.token_store.store(token)
        logger.info("Stored session token")
