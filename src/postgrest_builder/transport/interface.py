"""
Transport interface.

A Transport performs the HTTP exchange for a fully prepared request. The
library ships only an in-memory implementation; production code plugs in
its own (httpx, aiohttp, ...) by satisfying the `Transport` protocol.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol, runtime_checkable


def _freeze(headers: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType({str(k).lower(): str(v) for k, v in headers.items()})


@dataclass(frozen=True)
class PreparedRequest:
    """
    A request ready to be sent.

    Attributes:
        method: HTTP method name (e.g. "GET")
        url: Full URL including the encoded query string
        headers: Final, lower-cased request headers
        body: Encoded body, or None when nothing is sent
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))


@dataclass(frozen=True)
class TransportResponse:
    """
    Raw response returned by a Transport.

    Attributes:
        status: HTTP status code
        headers: Response headers, lower-cased
        body: Raw body; empty when the server sent none
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | str = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))

    @property
    def text(self) -> str:
        """Body decoded as UTF-8."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@runtime_checkable
class Transport(Protocol):
    """
    Protocol for objects that send prepared requests.

    Implementations raise `TransportError` when the exchange fails (DNS,
    connection reset, timeout). HTTP error statuses are not failures at
    this level; they are returned as regular responses.

    Example:
        >>> class HttpxTransport:
        ...     def __init__(self, client: httpx.AsyncClient):
        ...         self._client = client
        ...
        ...     async def execute(self, request: PreparedRequest) -> TransportResponse:
        ...         r = await self._client.request(
        ...             request.method, request.url, headers=request.headers, content=request.body
        ...         )
        ...         return TransportResponse(r.status_code, dict(r.headers), r.content)
    """

    async def execute(self, request: PreparedRequest) -> TransportResponse:
        """
        Send a request and return the raw response.

        Raises:
            TransportError: If no response could be obtained
        """
        ...


__all__ = [
    "PreparedRequest",
    "TransportResponse",
    "Transport",
]
