"""Token providers for social sign-in.

A token provider produces the provider-issued token (usually an OpenID
Connect ID token) that the backend exchanges for a session. Anything with a
``token_key`` label and an async ``fetch_token()`` qualifies; the classes
below cover static tokens, arbitrary async callables, and the OAuth
authorization-code exchange.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

import httpx

from ..errors import MissingTokenError, ProviderAuthorizationError


@runtime_checkable
class TokenProvider(Protocol):
    """Produces a provider token to send to the backend."""

    # JSON key the provider's token traditionally travels under
    token_key: str

    async def fetch_token(self) -> str:
        ...


class StaticTokenProvider:
    """Provider for a token obtained elsewhere (tests, custom flows)."""

    def __init__(self, token: str, token_key: str = "idToken"):
        self.token = token
        self.token_key = token_key

    async def fetch_token(self) -> str:
        return self.token


class CallableTokenProvider:
    """Adapts any async callable returning a token.

    Usage:
        provider = CallableTokenProvider(google_flow.get_id_token)
    """

    def __init__(self, fetch: Callable[[], Awaitable[str]], token_key: str = "idToken"):
        self._fetch = fetch
        self.token_key = token_key

    async def fetch_token(self) -> str:
        return await self._fetch()


class OAuthCodeTokenProvider:
    """Exchanges an OAuth 2.0 authorization code for the provider's ID token.

    Falls back to the access token when the provider issues no ID token.

    Usage:
        provider = OAuthCodeTokenProvider(
            token_url="https://oauth2.googleapis.com/token",
            client_id="...",
            client_secret="...",
            redirect_uri="http://localhost:3000/callback",
            code=code_from_callback,
        )
        await session.sign_in("google", provider)
    """

    token_key = "idToken"

    def __init__(
        self,
        token_url: str,
        client_id: str,
        code: str,
        redirect_uri: str,
        client_secret: str | None = None,
        code_verifier: str | None = None,
        timeout: float = 30.0,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.code = code
        self.redirect_uri = redirect_uri
        self.code_verifier = code_verifier
        self.timeout = timeout

    def _form(self) -> dict[str, str]:
        form = {
            "grant_type": "authorization_code",
            "code": self.code,
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
        }
        if self.client_secret:
            form["client_secret"] = self.client_secret
        if self.code_verifier:
            form["code_verifier"] = self.code_verifier
        return form

    async def fetch_token(self) -> str:
        """Run the code exchange.

        Raises:
            ProviderAuthorizationError: If the token endpoint rejects the code
            MissingTokenError: If the response carries neither id_token nor access_token
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.token_url,
                data=self._form(),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )

            if response.status_code != 200:
                try:
                    error_data: Any = response.json() if response.content else {}
                except ValueError:
                    error_data = {"raw_response": response.text[:500]}
                error_code = error_data.get("error", "exchange_failed") if isinstance(error_data, dict) else "exchange_failed"
                raise ProviderAuthorizationError(
                    RuntimeError(f"Token exchange failed: {response.status_code} ({error_code})"),
                    provider=self.token_url,
                )

            data = response.json()

        token = data.get("id_token") or data.get("access_token")
        if not token:
            raise MissingTokenError("Token endpoint returned no id_token or access_token")
        return token
