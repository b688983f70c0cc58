"""Authentication module.

Provides the session client, social sign-in negotiation and token providers.

Usage:
    from better_auth.auth import AuthSession, StaticTokenProvider

    async with AuthSession("https://your-server.com") as auth:
        await auth.sign_in("apple", StaticTokenProvider(identity_token))
"""

from .negotiator import SignInNegotiator, SocialSignInOptions
from .providers import CallableTokenProvider, OAuthCodeTokenProvider, StaticTokenProvider, TokenProvider
from .session import AuthSession

__all__ = [
    "AuthSession",
    "SignInNegotiator",
    "SocialSignInOptions",
    "TokenProvider",
    "StaticTokenProvider",
    "CallableTokenProvider",
    "OAuthCodeTokenProvider",
]
