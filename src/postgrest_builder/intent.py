"""
Query intents: the operation a request performs.

Each intent sets the HTTP method, the `prefer` negotiation tokens and, for
mutations, the request body. Intents are pure `RequestState -> RequestState`
functions; the facade in `builder.py` exposes them fluently.

Aggregate helpers (`sum_`, `avg`, `min_`, `max_`, `count`) only build column
expressions meant to be passed to `select`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel

from postgrest_builder.exceptions import InvalidArgumentError
from postgrest_builder.request import Method, RequestState
from postgrest_builder.types import Payload

E = TypeVar("E", bound=Enum)


class Count(Enum):
    """
    Row counting strategy requested through `prefer: count=...`.

    Values:
        EXACT: Accurate count, may be slow on large tables
        PLANNED: Planner estimate
        ESTIMATED: Exact below a threshold, planned above it
    """

    EXACT = "exact"
    PLANNED = "planned"
    ESTIMATED = "estimated"


class Returning(Enum):
    """
    Representation returned by mutations through `prefer: return=...`.

    Values:
        REPRESENTATION: Return the affected rows
        MINIMAL: Return no body
        HEADERS_ONLY: Return only the Location header
    """

    REPRESENTATION = "representation"
    MINIMAL = "minimal"
    HEADERS_ONLY = "headers-only"


def _coerce(enum_cls: type[E], value: E | str, operation: str, argument: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(repr(m.value) for m in enum_cls)
        raise InvalidArgumentError(operation, argument, f"one of {choices}", value) from None


def _columns(operation: str, columns: str | Sequence[str]) -> str:
    if isinstance(columns, str):
        return columns
    if isinstance(columns, Sequence) and all(isinstance(c, str) for c in columns):
        return ",".join(columns)
    raise InvalidArgumentError(operation, "columns", "a string or a list of strings", columns)


def _payload(operation: str, data: Any) -> Payload:
    if isinstance(data, (Mapping, BaseModel)):
        return data
    if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        if all(isinstance(row, (Mapping, BaseModel)) for row in data):
            return data
    raise InvalidArgumentError(
        operation, "data", "a mapping, a pydantic model, or a list of them", data
    )


def _prefer(*tokens: str | None) -> str:
    return ",".join(t for t in tokens if t)


def select(
    state: RequestState,
    columns: str | Sequence[str] = "*",
    *,
    count: Count | str = Count.EXACT,
    returning: bool = False,
) -> RequestState:
    """
    Read rows from the relation.

    Without `returning=True` the request uses HEAD, which asks PostgREST
    for headers (counts) only; with it the request uses GET and returns rows.

    Args:
        state: Current request
        columns: `"*"`, a raw column expression, or a list of column names
        count: Counting strategy sent as `prefer: count=...`
        returning: Whether rows should be returned in the body

    Returns:
        Updated request

    Example:
        >>> state = select(state, ["id", "name"], returning=True)
        >>> state.get_query("select")
        'id,name'
    """
    count = _coerce(Count, count, "select", "count")
    return (
        state.replace_query("select", _columns("select", columns))
        .with_header("prefer", f"count={count.value}")
        .with_method(Method.GET if returning else Method.HEAD)
    )


def insert(
    state: RequestState,
    data: Payload,
    *,
    on_conflict: str | None = None,
    returning: Returning | str = Returning.REPRESENTATION,
    count: Count | str = Count.EXACT,
) -> RequestState:
    """
    Insert one or more rows.

    When `on_conflict` is given the request also asks PostgREST to merge
    duplicates on that column, turning the insert into an upsert.

    Raises:
        InvalidArgumentError: If data is not a mapping, model, or list of them
    """
    returning = _coerce(Returning, returning, "insert", "returning")
    count = _coerce(Count, count, "insert", "count")
    prefer = _prefer(
        f"return={returning.value}",
        f"count={count.value}",
        f"on_conflict={on_conflict}" if on_conflict else None,
        "resolution=merge-duplicates" if on_conflict else None,
    )
    return (
        state.with_method(Method.POST)
        .with_header("prefer", prefer)
        .replace_query("on_conflict", on_conflict or None)
        .with_body(_payload("insert", data))
    )


def upsert(
    state: RequestState,
    data: Payload,
    *,
    on_conflict: str | None = None,
    returning: Returning | str = Returning.REPRESENTATION,
    count: Count | str = Count.EXACT,
) -> RequestState:
    """
    Insert rows, merging with existing ones on conflict.

    `resolution=merge-duplicates` is always requested, whether or not a
    conflict target is named.
    """
    returning = _coerce(Returning, returning, "upsert", "returning")
    count = _coerce(Count, count, "upsert", "count")
    prefer = _prefer(
        "resolution=merge-duplicates",
        f"return={returning.value}",
        f"count={count.value}",
        f"on_conflict={on_conflict}" if on_conflict else None,
    )
    return (
        state.with_method(Method.POST)
        .with_header("prefer", prefer)
        .replace_query("on_conflict", on_conflict or None)
        .with_body(_payload("upsert", data))
    )


def update(
    state: RequestState,
    data: Payload,
    *,
    returning: Returning | str = Returning.REPRESENTATION,
    count: Count | str = Count.EXACT,
) -> RequestState:
    """Update the rows matched by the request's filters."""
    returning = _coerce(Returning, returning, "update", "returning")
    count = _coerce(Count, count, "update", "count")
    return (
        state.with_method(Method.PATCH)
        .with_header("prefer", _prefer(f"return={returning.value}", f"count={count.value}"))
        .with_body(_payload("update", data))
    )


def delete(
    state: RequestState,
    *,
    returning: Returning | str = Returning.REPRESENTATION,
    count: Count | str = Count.EXACT,
) -> RequestState:
    """Delete the rows matched by the request's filters. No body is set."""
    returning = _coerce(Returning, returning, "delete", "returning")
    count = _coerce(Count, count, "delete", "count")
    return state.with_method(Method.DELETE).with_header(
        "prefer", _prefer(f"return={returning.value}", f"count={count.value}")
    )


def _aggregate(function: str, column: str, as_: str | None) -> str:
    if not isinstance(column, str) or not column:
        raise InvalidArgumentError(function, "column", "a non-empty string", column)
    expression = f"{column}.{function}()"
    return f"{as_}:{expression}" if as_ else expression


def sum_(column: str, as_: str | None = None) -> str:
    """`column.sum()`, optionally aliased as `alias:column.sum()`."""
    return _aggregate("sum", column, as_)


def avg(column: str, as_: str | None = None) -> str:
    return _aggregate("avg", column, as_)


def min_(column: str, as_: str | None = None) -> str:
    return _aggregate("min", column, as_)


def max_(column: str, as_: str | None = None) -> str:
    return _aggregate("max", column, as_)


def count(column: str, as_: str | None = None) -> str:
    """
    Count aggregate expression for use in `select`.

    Example:
        >>> count("id", as_="total")
        'total:id.count()'
    """
    return _aggregate("count", column, as_)


__all__ = [
    "Count",
    "Returning",
    "select",
    "insert",
    "upsert",
    "update",
    "delete",
    "sum_",
    "avg",
    "min_",
    "max_",
    "count",
]
