"""
Capability protocols for the fluent builder.

The builder surface is split into three narrow roles. `QueryBuilder`
implements all of them; code that only needs one role can depend on the
matching protocol instead of the concrete class.

Protocols:
- QueryIntentOps: what the request does (select, insert, upsert, update, delete)
- FilterOps: which rows it applies to
- TransformOps: how the result is shaped (order, pagination, media type)

Example:
    >>> from postgrest_builder.protocols import FilterOps
    >>>
    >>> def only_active(query: FilterOps) -> FilterOps:
    ...     return query.eq("status", "active")
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, Self, runtime_checkable

from postgrest_builder.conditions import Condition
from postgrest_builder.intent import Count, Returning
from postgrest_builder.request import RequestState
from postgrest_builder.transform import MediaType
from postgrest_builder.types import Payload


@runtime_checkable
class QueryIntentOps(Protocol):
    """
    Protocol for choosing the operation a request performs.

    Each method sets the HTTP method and `prefer` tokens and returns a new
    builder; the receiver is never modified.
    """

    @property
    def request(self) -> RequestState: ...

    def select(
        self,
        columns: str | Sequence[str] = "*",
        *,
        count: Count | str = Count.EXACT,
        returning: bool = False,
    ) -> Self: ...

    def insert(
        self,
        data: Payload,
        *,
        on_conflict: str | None = None,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self: ...

    def upsert(
        self,
        data: Payload,
        *,
        on_conflict: str | None = None,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self: ...

    def update(
        self,
        data: Payload,
        *,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self: ...

    def delete(
        self,
        *,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self: ...


@runtime_checkable
class FilterOps(Protocol):
    """
    Protocol for restricting the rows a request applies to.

    Filters on the same column replace each other; filters on different
    columns combine with AND.
    """

    def where(self, condition: Condition | tuple) -> Self: ...

    def filter(self, column: str, operator: str, value: Any) -> Self: ...

    def not_(self, column: str, operator: str, value: Any) -> Self: ...

    def all_of(
        self, conditions: str | Sequence[Any], *, foreign_table: str | None = None
    ) -> Self: ...

    def any_of(
        self, conditions: str | Sequence[Any], *, foreign_table: str | None = None
    ) -> Self: ...

    def match(self, query: Mapping[str, Any]) -> Self: ...

    def eq(self, column: str, value: Any) -> Self: ...

    def neq(self, column: str, value: Any) -> Self: ...

    def gt(self, column: str, value: Any) -> Self: ...

    def gte(self, column: str, value: Any) -> Self: ...

    def lt(self, column: str, value: Any) -> Self: ...

    def lte(self, column: str, value: Any) -> Self: ...

    def like(self, column: str, pattern: str) -> Self: ...

    def ilike(self, column: str, pattern: str) -> Self: ...

    def like_all_of(self, column: str, patterns: str | Sequence[str]) -> Self: ...

    def like_any_of(self, column: str, patterns: str | Sequence[str]) -> Self: ...

    def ilike_all_of(self, column: str, patterns: str | Sequence[str]) -> Self: ...

    def ilike_any_of(self, column: str, patterns: str | Sequence[str]) -> Self: ...

    def regex_match(self, column: str, pattern: str) -> Self: ...

    def regex_imatch(self, column: str, pattern: str) -> Self: ...

    def is_(self, column: str, value: bool | str | None) -> Self: ...

    def is_distinct(self, column: str, value: Any) -> Self: ...

    def in_(self, column: str, values: Sequence[Any]) -> Self: ...

    def within(self, column: str, values: Sequence[Any]) -> Self: ...

    def contains(self, column: str, value: str | Sequence[Any] | Mapping) -> Self: ...

    def contained_by(self, column: str, value: str | Sequence[Any] | Mapping) -> Self: ...

    def overlaps(self, column: str, value: str | Sequence[Any] | Mapping) -> Self: ...

    def range_lt(self, column: str, range_: str) -> Self: ...

    def range_gt(self, column: str, range_: str) -> Self: ...

    def range_gte(self, column: str, range_: str) -> Self: ...

    def range_lte(self, column: str, range_: str) -> Self: ...

    def range_adjacent(self, column: str, range_: str) -> Self: ...

    def text_search(
        self,
        column: str,
        query: str,
        *,
        type: str | None = None,  # noqa: A002
        config: str | None = None,
    ) -> Self: ...


@runtime_checkable
class TransformOps(Protocol):
    """Protocol for shaping the response: ordering, pagination, representation."""

    def schema(self, name: str) -> Self: ...

    def with_custom_media_type(self, media_type: MediaType | str) -> Self: ...

    def order(
        self,
        column: str,
        *,
        asc: bool = False,
        null_first: bool = False,
        foreign_table: str | None = None,
    ) -> Self: ...

    def limit(self, count: int, *, foreign_table: str | None = None) -> Self: ...

    def range(
        self, from_: int | float, to: int | float, *, foreign_table: str | None = None
    ) -> Self: ...

    def single(self) -> Self: ...

    def maybe_single(self) -> Self: ...

    def csv(self) -> Self: ...

    def geojson(self) -> Self: ...

    def explain(
        self,
        *,
        analyze: bool = False,
        verbose: bool = False,
        settings: bool = False,
        buffers: bool = False,
        wal: bool = False,
        format: str = "text",  # noqa: A002
    ) -> Self: ...

    def rollback(self) -> Self: ...

    def returning(self, columns: Sequence[str] | None = None) -> Self: ...


__all__ = [
    "QueryIntentOps",
    "FilterOps",
    "TransformOps",
]
