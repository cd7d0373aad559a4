"""
Result shaping: ordering, pagination, representation and media types.

`order` accumulates across calls; `limit` and `range` overwrite. Media type
switches replace the `accept` header wholesale, while `rollback` and
`returning` add tokens to `prefer`.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from postgrest_builder.exceptions import InvalidArgumentError
from postgrest_builder.request import Method, RequestState


class MediaType(Enum):
    """
    Response media types PostgREST negotiates through `accept`.

    Lookup by name is case-insensitive via `MediaType.from_name`; POSTGIS
    is an alias of GEOJSON.
    """

    DEFAULT = "*/*"
    CSV = "text/csv"
    JSON = "application/json"
    OPENAPI = "application/openapi+json"
    GEOJSON = "application/geo+json"
    POSTGIS = "application/geo+json"
    PGRST_PLAN = "application/vnd.pgrst.plan+json"
    PGRST_OBJECT = "application/vnd.pgrst.object+json"
    PGRST_ARRAY = "application/vnd.pgrst.array+json"

    @classmethod
    def from_name(cls, name: MediaType | str) -> MediaType:
        """Resolve a member or member name; unknown names give DEFAULT."""
        if isinstance(name, MediaType):
            return name
        return cls.__members__.get(str(name).upper(), cls.DEFAULT)


EXPLAIN_OPTIONS = ("analyze", "verbose", "settings", "buffers", "wal")
EXPLAIN_FORMATS = frozenset({"json", "text"})


def _key(name: str, foreign_table: str | None) -> str:
    return f"{foreign_table}.{name}" if foreign_table else name


def schema(state: RequestState, name: str) -> RequestState:
    """
    Target another database schema.

    The schema is turned into an `accept-profile`/`content-profile` header
    when the request is prepared for sending.
    """
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError("schema", "name", "a non-empty string", name)
    return state.with_schema(name)


def with_custom_media_type(state: RequestState, media_type: MediaType | str) -> RequestState:
    """Replace `accept` with one of the known media types."""
    return state.replace_header("accept", MediaType.from_name(media_type).value)


def order(
    state: RequestState,
    column: str,
    *,
    asc: bool = False,
    null_first: bool = False,
    foreign_table: str | None = None,
) -> RequestState:
    """
    Append an ordering term.

    Repeated calls accumulate in call order under one `order` key.

    Example:
        >>> state = order(order(state, "created_at"), "id", asc=True)
        >>> state.get_query("order")
        'created_at.desc.nullslast,id.asc.nullslast'
    """
    if not isinstance(column, str) or not column:
        raise InvalidArgumentError("order", "column", "a non-empty string", column)
    direction = "asc" if asc else "desc"
    nulls = "nullsfirst" if null_first else "nullslast"
    return state.with_query(_key("order", foreign_table), f"{column}.{direction}.{nulls}")


def limit(state: RequestState, count: int, *, foreign_table: str | None = None) -> RequestState:
    """Limit the number of rows; the last call wins."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidArgumentError("limit", "count", "an int", count)
    return state.replace_query(_key("limit", foreign_table), count)


def range_(
    state: RequestState,
    from_: int | float,
    to: int | float,
    *,
    foreign_table: str | None = None,
) -> RequestState:
    """
    Restrict rows to the inclusive window `[from_, to]`.

    Sets `offset` to `from_` and `limit` to `to - from_ + 1`. A later `limit`
    call overrides the computed limit but keeps the offset.

    Raises:
        InvalidArgumentError: Unless both bounds are ints or both are floats
    """
    both_int = all(isinstance(v, int) and not isinstance(v, bool) for v in (from_, to))
    both_float = all(isinstance(v, float) for v in (from_, to))
    if not (both_int or both_float):
        raise InvalidArgumentError("range", "from_/to", "two ints or two floats", (from_, to))
    return state.replace_query(_key("offset", foreign_table), from_).replace_query(
        _key("limit", foreign_table), to - from_ + 1
    )


def single(state: RequestState) -> RequestState:
    """Ask for exactly one row returned as an object."""
    return with_custom_media_type(state, MediaType.PGRST_OBJECT)


def maybe_single(state: RequestState) -> RequestState:
    """
    Ask for zero or one row.

    GET requests use plain JSON (the row count is checked client side);
    every other method negotiates the single-object media type.
    """
    if state.method is Method.GET:
        return with_custom_media_type(state, MediaType.JSON)
    return with_custom_media_type(state, MediaType.PGRST_OBJECT)


def csv(state: RequestState) -> RequestState:
    return with_custom_media_type(state, MediaType.CSV)


def geojson(state: RequestState) -> RequestState:
    return with_custom_media_type(state, MediaType.GEOJSON)


def explain(
    state: RequestState,
    *,
    analyze: bool = False,
    verbose: bool = False,
    settings: bool = False,
    buffers: bool = False,
    wal: bool = False,
    format: str = "text",  # noqa: A002
) -> RequestState:
    """
    Return the execution plan instead of rows.

    The current `accept` value is embedded as the `for=` target. Formats
    other than "json" fall back to "text".

    Example:
        >>> explain(state, analyze=True, format="json").get_header("accept")
        'application/vnd.pgrst.plan+json;for=*/*;options:analyze'
    """
    fmt = format if format in EXPLAIN_FORMATS else "text"
    flags = dict(zip(EXPLAIN_OPTIONS, (analyze, verbose, settings, buffers, wal), strict=True))
    options = "|".join(name for name, enabled in flags.items() if enabled)
    target = state.get_header("accept") or ""
    plan = f"application/vnd.pgrst.plan+{fmt};for={target};options:{options}"
    return state.replace_header("accept", plan)


def rollback(state: RequestState) -> RequestState:
    """Run the request in a transaction that is rolled back afterwards."""
    return state.with_header("prefer", "tx=rollback")


def _column_name(column: str) -> str:
    if not isinstance(column, str):
        raise InvalidArgumentError("returning", "columns", "a list of strings", column)
    return column if '"' in column else column.strip()


def returning(state: RequestState, columns: Sequence[str] | None = None) -> RequestState:
    """
    Return the affected rows of a mutation, optionally projected.

    Quoted column names are kept verbatim; others are trimmed. No columns
    (or an empty list) selects `*`.
    """
    if columns is None or isinstance(columns, str):
        projection = (columns or "").strip() or "*"
    elif not isinstance(columns, Sequence):
        raise InvalidArgumentError("returning", "columns", "a list of strings", columns)
    else:
        projection = ",".join(_column_name(c) for c in columns) or "*"
    return state.replace_query("select", projection).with_header(
        "prefer", "return=representation"
    )


__all__ = [
    "MediaType",
    "EXPLAIN_OPTIONS",
    "schema",
    "with_custom_media_type",
    "order",
    "limit",
    "range_",
    "single",
    "maybe_single",
    "csv",
    "geojson",
    "explain",
    "rollback",
    "returning",
]
