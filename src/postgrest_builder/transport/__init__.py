"""
Transports that carry prepared requests to a PostgREST server.

Example:
    >>> from postgrest_builder.transport import InMemoryTransport
    >>> transport = InMemoryTransport()
"""

from postgrest_builder.transport.in_memory import InMemoryTransport
from postgrest_builder.transport.interface import (
    PreparedRequest,
    Transport,
    TransportResponse,
)

__all__ = [
    "Transport",
    "PreparedRequest",
    "TransportResponse",
    "InMemoryTransport",
]
