"""HTTP transport capability.

The client core only needs one thing from the network: send a request once
and hand back status, headers and body. :class:`HttpxTransport` is the
default implementation; tests and embedders can pass anything that matches
the :class:`Transport` protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Protocol, runtime_checkable

import httpx

from ..errors import NetworkError, RequestTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class TransportResponse:
    """Raw response as received from the backend."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        if isinstance(self.headers, httpx.Headers):
            return self.headers.get(name)
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@runtime_checkable
class Transport(Protocol):
    """Single-attempt asynchronous request sender."""

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None = None,
    ) -> TransportResponse:
        ...


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Usage:
        async with HttpxTransport() as transport:
            response = await transport.send("GET", url, {"Accept": "application/json"})
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the transport.

        Args:
            client: Existing client to reuse (not closed by :meth:`close`)
            timeout: Per-request timeout in seconds for the owned client
        """
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None = None,
    ) -> TransportResponse:
        try:
            response = await self._client.request(
                method=method,
                url=url,
                headers=dict(headers),
                content=body,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self.timeout, e) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error: {e}", e) from e

        logger.debug("%s %s -> %d (%d bytes)", method, url, response.status_code, len(response.content))
        return TransportResponse(
            status=response.status_code,
            headers=response.headers,
            body=response.content,
        )
