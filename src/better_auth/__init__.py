"""Better Auth client.

Authenticates against a Better Auth backend, keeps the session token in a
pluggable store, and normalizes the backend's response shapes.

Usage:
    from better_auth import AuthSession, StaticTokenProvider

    async with AuthSession("https://your-server.com") as auth:
        data = await auth.sign_in("google", StaticTokenProvider(id_token))
        session = await auth.get_session()
        await auth.sign_out()
"""

from .api import ApiFailure, DecodeFailure, EnvelopeDecoder, HttpxTransport, Ok, Transport, TransportResponse
from .auth import (
    AuthSession,
    CallableTokenProvider,
    OAuthCodeTokenProvider,
    SignInNegotiator,
    SocialSignInOptions,
    StaticTokenProvider,
    TokenProvider,
)
from .config import ClientSettings
from .errors import (
    ApiFailureError,
    BetterAuthError,
    DecodingError,
    InvalidEndpointError,
    InvalidResponseError,
    MissingTokenError,
    NetworkError,
    ProviderAuthorizationError,
    RequestTimeoutError,
    StorageError,
)
from .models import (
    ApiError,
    AuthData,
    EmptyResponse,
    Envelope,
    KnownErrorCode,
    RefreshTokenResponse,
    Session,
    SocialSignInTokenResponse,
    User,
)
from .storage import (
    FileSecureStore,
    MemorySecureStore,
    ObservableTokenStore,
    SecureStore,
    SecureTokenStore,
    TokenChangeEvent,
    TokenChangeNotifier,
    TokenStore,
)

__all__ = [
    "AuthSession",
    "SignInNegotiator",
    "SocialSignInOptions",
    "TokenProvider",
    "StaticTokenProvider",
    "CallableTokenProvider",
    "OAuthCodeTokenProvider",
    "EnvelopeDecoder",
    "Ok",
    "ApiFailure",
    "DecodeFailure",
    "Transport",
    "TransportResponse",
    "HttpxTransport",
    "ClientSettings",
    "BetterAuthError",
    "InvalidEndpointError",
    "NetworkError",
    "RequestTimeoutError",
    "InvalidResponseError",
    "DecodingError",
    "ApiFailureError",
    "MissingTokenError",
    "ProviderAuthorizationError",
    "StorageError",
    "ApiError",
    "AuthData",
    "EmptyResponse",
    "Envelope",
    "KnownErrorCode",
    "RefreshTokenResponse",
    "Session",
    "SocialSignInTokenResponse",
    "User",
    "SecureStore",
    "MemorySecureStore",
    "FileSecureStore",
    "TokenStore",
    "SecureTokenStore",
    "ObservableTokenStore",
    "TokenChangeEvent",
    "TokenChangeNotifier",
]
