"""
Immutable request description accumulated by the builder.

A RequestState is created once per top-level query, threaded through any
number of builder operations (each returning a new value), and finally
handed to the execution boundary. Nothing in this module performs I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any
from urllib.parse import urlencode

from postgrest_builder.types import QueryParam

# Headers whose values accumulate as comma-separated tokens
MERGEABLE_HEADERS = frozenset({"prefer"})


class Method(Enum):
    """
    HTTP methods a PostgREST request may use.

    Values:
        GET: Read rows and return them
        HEAD: Read only headers (counts) without a body
        POST: Insert or upsert rows
        PATCH: Update rows
        DELETE: Delete rows
    """

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def is_read(self) -> bool:
        """True for methods that do not modify data."""
        return self in (Method.GET, Method.HEAD)

    @classmethod
    def coerce(cls, value: Method | str) -> Method:
        """Accept a Method or its name in any case."""
        if isinstance(value, Method):
            return value
        return cls(str(value).upper())


def _merge(current: str | None, value: str) -> str:
    return f"{current},{value}" if current else value


def _merge_tokens(current: str | None, value: str) -> str:
    # Tokens already present are kept once, in their first position
    tokens = [t for t in (current or "").split(",") if t]
    for token in value.split(","):
        if token and token not in tokens:
            tokens.append(token)
    return ",".join(tokens)


@dataclass(frozen=True)
class RequestState:
    """
    Description of one outbound PostgREST request.

    Attributes:
        url: Base URL plus REST path and relation name
        method: HTTP method to use
        query: Ordered query parameters, at most one entry per key
        headers: Read-only mapping of lower-cased header name to value
        body: Pre-encoded payload (mapping, model, or list of either)
        schema: Logical database schema, turned into a profile header at
            the execution boundary

    Example:
        >>> state = RequestState(url="http://localhost/rest/v1/users")
        >>> state = state.replace_query("select", "id,name").with_header("prefer", "count=exact")
        >>> state.get_query("select")
        'id,name'
    """

    url: str
    method: Method = Method.GET
    query: tuple[QueryParam, ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    schema: str | None = None

    def __post_init__(self) -> None:
        normalized = {str(k).lower(): str(v) for k, v in self.headers.items()}
        object.__setattr__(self, "headers", MappingProxyType(normalized))
        object.__setattr__(self, "method", Method.coerce(self.method))
        object.__setattr__(self, "query", tuple((str(k), str(v)) for k, v in self.query))

    def __hash__(self) -> int:
        # body may hold unhashable payloads and is left out
        return hash((self.url, self.method, self.query, tuple(sorted(self.headers.items())), self.schema))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_query(self, key: str) -> str | None:
        """Return the value stored under a query key, or None."""
        for k, v in self.query:
            if k == key:
                return v
        return None

    def get_header(self, key: str) -> str | None:
        """Return a header value by case-insensitive name, or None."""
        return self.headers.get(key.lower())

    @property
    def query_params(self) -> dict[str, str]:
        """Query parameters as a plain dict (insertion ordered)."""
        return dict(self.query)

    @property
    def query_string(self) -> str:
        """URL-encoded query string in parameter order."""
        return urlencode(self.query)

    # ------------------------------------------------------------------
    # Persistent updates
    # ------------------------------------------------------------------

    def with_method(self, method: Method | str) -> RequestState:
        """Return a copy using a different HTTP method."""
        return replace(self, method=Method.coerce(method))

    def with_query(self, key: str, value: Any) -> RequestState:
        """
        Return a copy with a value accumulated under a query key.

        If the key is already present the two values are joined with a
        comma, in call order, keeping the key's original position. A value
        of None is a no-op.

        Example:
            >>> s = RequestState(url="u").with_query("order", "a.desc.nullslast")
            >>> s.with_query("order", "b.asc.nullslast").get_query("order")
            'a.desc.nullslast,b.asc.nullslast'
        """
        if value is None:
            return self
        return self._put_query(key, str(value), merge=True)

    def replace_query(self, key: str, value: Any) -> RequestState:
        """
        Return a copy with a query key set to a value, overwriting any prior value.

        The key keeps its original position when it already exists. A value
        of None is a no-op.
        """
        if value is None:
            return self
        return self._put_query(key, str(value), merge=False)

    def without_query(self, key: str) -> RequestState:
        """Return a copy with a query key removed."""
        return replace(self, query=tuple((k, v) for k, v in self.query if k != key))

    def with_header(self, key: str, value: Any) -> RequestState:
        """
        Return a copy with a header set.

        `prefer` accumulates comma-separated tokens, skipping tokens it
        already holds; every other header is replaced. A value of None is
        a no-op.
        """
        if value is None:
            return self
        name = key.lower()
        if name in MERGEABLE_HEADERS:
            return self._put_header(name, _merge_tokens(self.headers.get(name), str(value)))
        return self._put_header(name, str(value))

    def with_headers(self, headers: Mapping[str, Any]) -> RequestState:
        """Apply with_header for each entry, in mapping order."""
        state = self
        for key, value in headers.items():
            state = state.with_header(key, value)
        return state

    def replace_header(self, key: str, value: Any) -> RequestState:
        """Return a copy with a header replaced wholesale, even if mergeable."""
        if value is None:
            return self
        return self._put_header(key.lower(), str(value))

    def without_header(self, key: str) -> RequestState:
        """Return a copy with a header removed."""
        name = key.lower()
        return replace(self, headers={k: v for k, v in self.headers.items() if k != name})

    def with_body(self, data: Any) -> RequestState:
        """Return a copy carrying a new body; serialization happens later."""
        return replace(self, body=data)

    def with_schema(self, schema: str) -> RequestState:
        """Return a copy targeting another database schema."""
        return replace(self, schema=schema)

    def _put_query(self, key: str, value: str, *, merge: bool) -> RequestState:
        params: list[QueryParam] = []
        found = False
        for k, v in self.query:
            if k == key:
                params.append((k, _merge(v, value) if merge else value))
                found = True
            else:
                params.append((k, v))
        if not found:
            params.append((key, value))
        return replace(self, query=tuple(params))

    def _put_header(self, name: str, value: str) -> RequestState:
        return replace(self, headers={**self.headers, name: value})

    def __str__(self) -> str:
        """Human-readable string representation."""
        qs = self.query_string
        return f"{self.method.value} {self.url}{'?' + qs if qs else ''}"


__all__ = [
    "MERGEABLE_HEADERS",
    "Method",
    "RequestState",
]
