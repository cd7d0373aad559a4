"""
Fluent query builder.

`from_` seeds a request for one relation and wraps it in a QueryBuilder.
Every builder method returns a new QueryBuilder; the underlying
RequestState is available through `.request` once the query is complete.

Example:
    >>> from postgrest_builder import ClientContext, from_
    >>>
    >>> ctx = ClientContext(base_url="http://localhost:3000", api_key="anon")
    >>> query = (
    ...     from_(ctx, "users")
    ...     .select(["id", "name"], returning=True)
    ...     .eq("status", "active")
    ...     .order("created_at")
    ...     .limit(10)
    ... )
    >>> str(query.request)
    'GET http://localhost:3000/rest/v1/users?select=id%2Cname&status=eq.active&order=created_at.desc.nullslast&limit=10'
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Self

from postgrest_builder import filters, intent, transform
from postgrest_builder._version import __version__
from postgrest_builder.conditions import Condition
from postgrest_builder.context import ClientContext
from postgrest_builder.exceptions import InvalidArgumentError
from postgrest_builder.intent import Count, Returning
from postgrest_builder.request import Method, RequestState
from postgrest_builder.transform import MediaType
from postgrest_builder.types import Payload

logger = logging.getLogger(__name__)

CLIENT_INFO = f"postgrest-builder/{__version__}"


def seed_request(context: ClientContext, relation: str) -> RequestState:
    """
    Create the initial request for a relation.

    The request starts as a GET of the relation URL with the client's
    default headers and schema.
    """
    if not isinstance(relation, str) or not relation:
        raise InvalidArgumentError("from", "relation", "a non-empty string", relation)
    headers = {
        "x-client-info": CLIENT_INFO,
        "content-type": "application/json",
        "accept": transform.MediaType.DEFAULT.value,
        **context.default_headers(),
    }
    return RequestState(
        url=context.relation_url(relation),
        method=Method.GET,
        headers=headers,
        schema=context.schema,
    )


def from_(context: ClientContext, relation: str) -> QueryBuilder:
    """
    Start building a query against a table or view.

    Args:
        context: Client configuration
        relation: Table or view name

    Returns:
        QueryBuilder wrapping the seeded request
    """
    logger.debug(
        f"Building request for relation {relation!r}",
        extra={"relation": relation, "schema": context.schema},
    )
    return QueryBuilder(seed_request(context, relation))


class QueryBuilder:
    """
    Immutable fluent facade over a RequestState.

    Implements QueryIntentOps, FilterOps and TransformOps by delegating to
    the module-level functions in `intent`, `filters` and `transform`.
    Instances can be shared and branched freely:

    Example:
        >>> base = from_(ctx, "orders").select("*", returning=True)
        >>> open_orders = base.eq("status", "open")
        >>> recent = base.order("created_at").limit(5)
        >>> base.request.get_query("status") is None
        True
    """

    __slots__ = ("_state",)

    def __init__(self, state: RequestState) -> None:
        self._state = state

    @property
    def request(self) -> RequestState:
        """The accumulated request description."""
        return self._state

    def _apply(self, operation: Callable[..., RequestState], *args: Any, **kwargs: Any) -> Self:
        return type(self)(operation(self._state, *args, **kwargs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryBuilder):
            return NotImplemented
        return self._state == other._state

    def __repr__(self) -> str:
        return f"QueryBuilder({self._state!s})"

    # ------------------------------------------------------------------
    # QueryIntentOps
    # ------------------------------------------------------------------

    def select(
        self,
        columns: str | Sequence[str] = "*",
        *,
        count: Count | str = Count.EXACT,
        returning: bool = False,
    ) -> Self:
        return self._apply(intent.select, columns, count=count, returning=returning)

    def insert(
        self,
        data: Payload,
        *,
        on_conflict: str | None = None,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self:
        return self._apply(
            intent.insert, data, on_conflict=on_conflict, returning=returning, count=count
        )

    def upsert(
        self,
        data: Payload,
        *,
        on_conflict: str | None = None,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self:
        return self._apply(
            intent.upsert, data, on_conflict=on_conflict, returning=returning, count=count
        )

    def update(
        self,
        data: Payload,
        *,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self:
        return self._apply(intent.update, data, returning=returning, count=count)

    def delete(
        self,
        *,
        returning: Returning | str = Returning.REPRESENTATION,
        count: Count | str = Count.EXACT,
    ) -> Self:
        return self._apply(intent.delete, returning=returning, count=count)

    # ------------------------------------------------------------------
    # FilterOps
    # ------------------------------------------------------------------

    def where(self, condition: Condition | tuple) -> Self:
        return self._apply(filters.where, condition)

    def filter(self, column: str, operator: str, value: Any) -> Self:
        return self._apply(filters.filter, column, operator, value)

    def not_(self, column: str, operator: str, value: Any) -> Self:
        return self._apply(filters.not_, column, operator, value)

    def all_of(self, conditions: str | Sequence[Any], *, foreign_table: str | None = None) -> Self:
        return self._apply(filters.all_of, conditions, foreign_table=foreign_table)

    def any_of(self, conditions: str | Sequence[Any], *, foreign_table: str | None = None) -> Self:
        return self._apply(filters.any_of, conditions, foreign_table=foreign_table)

    def match(self, query: Mapping[str, Any]) -> Self:
        return self._apply(filters.match, query)

    def eq(self, column: str, value: Any) -> Self:
        return self._apply(filters.eq, column, value)

    def neq(self, column: str, value: Any) -> Self:
        return self._apply(filters.neq, column, value)

    def gt(self, column: str, value: Any) -> Self:
        return self._apply(filters.gt, column, value)

    def gte(self, column: str, value: Any) -> Self:
        return self._apply(filters.gte, column, value)

    def lt(self, column: str, value: Any) -> Self:
        return self._apply(filters.lt, column, value)

    def lte(self, column: str, value: Any) -> Self:
        return self._apply(filters.lte, column, value)

    def like(self, column: str, pattern: str) -> Self:
        return self._apply(filters.like, column, pattern)

    def ilike(self, column: str, pattern: str) -> Self:
        return self._apply(filters.ilike, column, pattern)

    def like_all_of(self, column: str, patterns: str | Sequence[str]) -> Self:
        return self._apply(filters.like_all_of, column, patterns)

    def like_any_of(self, column: str, patterns: str | Sequence[str]) -> Self:
        return self._apply(filters.like_any_of, column, patterns)

    def ilike_all_of(self, column: str, patterns: str | Sequence[str]) -> Self:
        return self._apply(filters.ilike_all_of, column, patterns)

    def ilike_any_of(self, column: str, patterns: str | Sequence[str]) -> Self:
        return self._apply(filters.ilike_any_of, column, patterns)

    def regex_match(self, column: str, pattern: str) -> Self:
        return self._apply(filters.regex_match, column, pattern)

    def regex_imatch(self, column: str, pattern: str) -> Self:
        return self._apply(filters.regex_imatch, column, pattern)

    def is_(self, column: str, value: bool | str | None) -> Self:
        return self._apply(filters.is_, column, value)

    def is_distinct(self, column: str, value: Any) -> Self:
        return self._apply(filters.is_distinct, column, value)

    def in_(self, column: str, values: Sequence[Any]) -> Self:
        return self._apply(filters.in_, column, values)

    within = in_

    def contains(self, column: str, value: str | Sequence[Any] | Mapping) -> Self:
        return self._apply(filters.contains, column, value)

    def contained_by(self, column: str, value: str | Sequence[Any] | Mapping) -> Self:
        return self._apply(filters.contained_by, column, value)

    def overlaps(self, column: str, value: str | Sequence[Any] | Mapping) -> Self:
        return self._apply(filters.overlaps, column, value)

    def range_lt(self, column: str, range_: str) -> Self:
        return self._apply(filters.range_lt, column, range_)

    def range_gt(self, column: str, range_: str) -> Self:
        return self._apply(filters.range_gt, column, range_)

    def range_gte(self, column: str, range_: str) -> Self:
        return self._apply(filters.range_gte, column, range_)

    def range_lte(self, column: str, range_: str) -> Self:
        return self._apply(filters.range_lte, column, range_)

    def range_adjacent(self, column: str, range_: str) -> Self:
        return self._apply(filters.range_adjacent, column, range_)

    def text_search(
        self,
        column: str,
        query: str,
        *,
        type: str | None = None,  # noqa: A002
        config: str | None = None,
    ) -> Self:
        return self._apply(filters.text_search, column, query, type=type, config=config)

    # ------------------------------------------------------------------
    # TransformOps
    # ------------------------------------------------------------------

    def schema(self, name: str) -> Self:
        return self._apply(transform.schema, name)

    def with_custom_media_type(self, media_type: MediaType | str) -> Self:
        return self._apply(transform.with_custom_media_type, media_type)

    def order(
        self,
        column: str,
        *,
        asc: bool = False,
        null_first: bool = False,
        foreign_table: str | None = None,
    ) -> Self:
        return self._apply(
            transform.order, column, asc=asc, null_first=null_first, foreign_table=foreign_table
        )

    def limit(self, count: int, *, foreign_table: str | None = None) -> Self:
        return self._apply(transform.limit, count, foreign_table=foreign_table)

    def range(
        self, from_: int | float, to: int | float, *, foreign_table: str | None = None
    ) -> Self:
        return self._apply(transform.range_, from_, to, foreign_table=foreign_table)

    def single(self) -> Self:
        return self._apply(transform.single)

    def maybe_single(self) -> Self:
        return self._apply(transform.maybe_single)

    def csv(self) -> Self:
        return self._apply(transform.csv)

    def geojson(self) -> Self:
        return self._apply(transform.geojson)

    def explain(
        self,
        *,
        analyze: bool = False,
        verbose: bool = False,
        settings: bool = False,
        buffers: bool = False,
        wal: bool = False,
        format: str = "text",  # noqa: A002
    ) -> Self:
        return self._apply(
            transform.explain,
            analyze=analyze,
            verbose=verbose,
            settings=settings,
            buffers=buffers,
            wal=wal,
            format=format,
        )

    def rollback(self) -> Self:
        return self._apply(transform.rollback)

    def returning(self, columns: Sequence[str] | None = None) -> Self:
        return self._apply(transform.returning, columns)


__all__ = [
    "CLIENT_INFO",
    "seed_request",
    "from_",
    "QueryBuilder",
]
