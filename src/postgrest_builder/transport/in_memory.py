"""
In-memory transport implementation.

Useful for testing code that executes queries without a running PostgREST
server. Requests are recorded and canned responses are replayed in order.
"""

import asyncio
from collections import deque
from collections.abc import Mapping
from typing import Any

from postgrest_builder.serialization import json_dumps
from postgrest_builder.transport.interface import PreparedRequest, TransportResponse

JSON_HEADERS = {"content-type": "application/json; charset=utf-8"}


class InMemoryTransport:
    """
    Transport that records requests and replays queued responses.

    When the queue is empty, every request is answered with `200 []`.
    Queued exceptions are raised instead of being returned, which lets
    tests exercise transport failures.

    Example:
        >>> transport = InMemoryTransport()
        >>> transport.respond_json(201, [{"id": 1}], headers={"content-range": "*/1"})
        >>> response = await transport.execute(request)
        >>> transport.last_request.method
        'POST'
    """

    def __init__(self) -> None:
        self._requests: list[PreparedRequest] = []
        self._responses: deque[TransportResponse | BaseException] = deque()
        self._lock: asyncio.Lock = asyncio.Lock()

    @property
    def requests(self) -> list[PreparedRequest]:
        """Copy of every request received, in order."""
        return list(self._requests)

    @property
    def last_request(self) -> PreparedRequest | None:
        return self._requests[-1] if self._requests else None

    @property
    def pending(self) -> int:
        """Number of queued responses not yet replayed."""
        return len(self._responses)

    def enqueue(self, response: TransportResponse | BaseException) -> None:
        """Queue a response, or an exception to raise, for the next request."""
        self._responses.append(response)

    def respond_json(
        self,
        status: int,
        payload: Any,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        """Queue a JSON response."""
        self.enqueue(
            TransportResponse(
                status=status,
                headers={**JSON_HEADERS, **(headers or {})},
                body=json_dumps(payload).encode("utf-8"),
            )
        )

    def fail_with(self, error: BaseException) -> None:
        """Queue an exception raised by the next execute call."""
        self.enqueue(error)

    def clear(self) -> None:
        """Forget recorded requests and queued responses."""
        self._requests.clear()
        self._responses.clear()

    async def execute(self, request: PreparedRequest) -> TransportResponse:
        async with self._lock:
            self._requests.append(request)
            outcome = self._responses.popleft() if self._responses else None
        if outcome is None:
            return TransportResponse(status=200, headers=JSON_HEADERS, body=b"[]")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


__all__ = ["InMemoryTransport"]
