"""
Row filters.

Every named filter is a thin adapter: it checks the shape of its
arguments, builds a condition from `postgrest_builder.conditions`, and
stores the encoded result under the column's query key. Applying a filter
to a column that already has one replaces the earlier value, so a key
never appears twice.

Example:
    >>> state = eq(state, "status", "active")
    >>> state = in_(state, "id", [1, 2, 3])
    >>> state.query_params
    {'status': 'eq.active', 'id': 'in.(1,2,3)'}
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from postgrest_builder.conditions import (
    ArrayModifier,
    Comparison,
    Condition,
    Operator,
    TextSearch,
    csv,
    format_value,
    group,
    to_condition,
    to_param,
)
from postgrest_builder.exceptions import InvalidArgumentError
from postgrest_builder.request import RequestState
from postgrest_builder.serialization import json_dumps

# `op`, `op(all)` or `fts(english)`
_OPERATOR_SEGMENT = re.compile(r"^(?P<op>[a-z]+)(?:\((?P<arg>[^()]*)\))?$")

_TEXT_SEARCH_TYPES = {
    None: Operator.FTS,
    "plain": Operator.PLFTS,
    "phrase": Operator.PHFTS,
    "websearch": Operator.WFTS,
}

_IS_KEYWORDS = frozenset({"null", "true", "false", "unknown"})


def _validate_operator(operation: str, operator: Any) -> str:
    """Check a raw operator expression such as `not.eq` or `like(any)`."""
    if isinstance(operator, Operator):
        return operator.value
    if not isinstance(operator, str) or not operator:
        raise InvalidArgumentError(operation, "operator", "a non-empty string", operator)
    for segment in operator.split("."):
        found = _OPERATOR_SEGMENT.match(segment)
        if found is None:
            raise InvalidArgumentError(operation, "operator", "an operator expression", operator)
        Operator.parse(found.group("op"))
    return operator


def _collection(operation: str, value: Any) -> str:
    # strings pass through, lists become `{a,b}`, mappings become JSON
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return f"{{{csv(value)}}}"
    if isinstance(value, Mapping):
        return json_dumps(value)
    raise InvalidArgumentError(operation, "value", "a string, a list, or a mapping", value)


def where(state: RequestState, condition: Condition | tuple) -> RequestState:
    """
    Apply a single condition as a top-level query parameter.

    Accepts any condition node or tuple form understood by
    `conditions.to_condition`, except pre-encoded strings, which have no
    column to key them by.
    """
    key, value = to_param(to_condition(condition))
    if key == "and":
        value = _join_groups(state.get_query(key), value)
    return state.replace_query(key, value)


def filter(state: RequestState, column: str, operator: str, value: Any) -> RequestState:  # noqa: A001
    """
    Escape hatch: store `operator.value` under `column` verbatim.

    The operator expression is validated against the operator vocabulary
    (`not.eq`, `like(any)` and `fts(english)` are all accepted), but the value
    is not escaped.
    """
    operator = _validate_operator("filter", operator)
    return state.replace_query(column, f"{operator}.{format_value(value)}")


def not_(state: RequestState, column: str, operator: str, value: Any) -> RequestState:
    """Negate a raw filter: `column=not.operator.value`."""
    operator = _validate_operator("not", operator)
    return state.replace_query(column, f"not.{operator}.{format_value(value)}")


def _logical(
    key: str,
    state: RequestState,
    conditions: str | Sequence[Any],
    foreign_table: str | None,
) -> RequestState:
    if isinstance(conditions, str):
        value = f"({conditions})"
    elif isinstance(conditions, Sequence):
        value = group(conditions)
    else:
        raise InvalidArgumentError(
            key, "conditions", "a filter string or a list of conditions", conditions
        )
    param = f"{foreign_table}.{key}" if foreign_table else key
    if key == "and":
        value = _join_groups(state.get_query(param), value)
    return state.replace_query(param, value)


def _join_groups(current: str | None, addition: str) -> str:
    # "(a.eq.1)" + "(b.eq.2)" -> "(a.eq.1,b.eq.2)"
    if not current or current == "()":
        return addition
    if addition == "()":
        return current
    return f"{current[:-1]},{addition[1:]}"


def all_of(
    state: RequestState,
    conditions: str | Sequence[Any],
    *,
    foreign_table: str | None = None,
) -> RequestState:
    """
    Require every condition to hold: `and=(c1,c2)`.

    Repeated calls extend the same group, so `all_of([a])` followed by
    `all_of([b])` gives `and=(a,b)`.

    Args:
        state: Current request
        conditions: Pre-encoded filter text (used verbatim), or a list of
            conditions, tuple forms, or strings
        foreign_table: Scope to an embedded relation (`{foreign}.and`)
    """
    return _logical("and", state, conditions, foreign_table)


def any_of(
    state: RequestState,
    conditions: str | Sequence[Any],
    *,
    foreign_table: str | None = None,
) -> RequestState:
    """
    Require at least one condition to hold: `or=(c1,c2)`.

    A later call replaces the group.
    """
    return _logical("or", state, conditions, foreign_table)


def match(state: RequestState, query: Mapping[str, Any]) -> RequestState:
    """
    Shorthand for one `eq` per entry, applied in mapping iteration order.

    Callers should not depend on the resulting parameter order.
    """
    if not isinstance(query, Mapping):
        raise InvalidArgumentError("match", "query", "a mapping of column to value", query)
    for column, value in query.items():
        state = eq(state, column, value)
    return state


def eq(state: RequestState, column: str, value: Any) -> RequestState:
    """Column equals value. Use `is_` to test for NULL."""
    return where(state, Comparison(Operator.EQ, column, value))


def neq(state: RequestState, column: str, value: Any) -> RequestState:
    return where(state, Comparison(Operator.NEQ, column, value))


def gt(state: RequestState, column: str, value: Any) -> RequestState:
    return where(state, Comparison(Operator.GT, column, value))


def gte(state: RequestState, column: str, value: Any) -> RequestState:
    return where(state, Comparison(Operator.GTE, column, value))


def lt(state: RequestState, column: str, value: Any) -> RequestState:
    return where(state, Comparison(Operator.LT, column, value))


def lte(state: RequestState, column: str, value: Any) -> RequestState:
    return where(state, Comparison(Operator.LTE, column, value))


def like(state: RequestState, column: str, pattern: str) -> RequestState:
    """Case-sensitive pattern match; `%` is the wildcard."""
    return where(state, Comparison(Operator.LIKE, column, pattern))


def ilike(state: RequestState, column: str, pattern: str) -> RequestState:
    return where(state, Comparison(Operator.ILIKE, column, pattern))


def _patterns(patterns: str | Sequence[str]) -> Sequence[str]:
    return [patterns] if isinstance(patterns, str) else patterns


def like_all_of(state: RequestState, column: str, patterns: str | Sequence[str]) -> RequestState:
    """Column matches every pattern: `like(all).{p1,p2}`."""
    return where(state, ArrayModifier(Operator.LIKE, column, _patterns(patterns), Operator.ALL))


def like_any_of(state: RequestState, column: str, patterns: str | Sequence[str]) -> RequestState:
    return where(state, ArrayModifier(Operator.LIKE, column, _patterns(patterns), Operator.ANY))


def ilike_all_of(state: RequestState, column: str, patterns: str | Sequence[str]) -> RequestState:
    return where(state, ArrayModifier(Operator.ILIKE, column, _patterns(patterns), Operator.ALL))


def ilike_any_of(state: RequestState, column: str, patterns: str | Sequence[str]) -> RequestState:
    return where(state, ArrayModifier(Operator.ILIKE, column, _patterns(patterns), Operator.ANY))


def regex_match(state: RequestState, column: str, pattern: str) -> RequestState:
    """POSIX regular expression match (`match`)."""
    return where(state, Comparison(Operator.MATCH, column, pattern))


def regex_imatch(state: RequestState, column: str, pattern: str) -> RequestState:
    """Case-insensitive POSIX regular expression match (`imatch`)."""
    return where(state, Comparison(Operator.IMATCH, column, pattern))


def is_(state: RequestState, column: str, value: bool | str | None) -> RequestState:
    """
    Identity test against NULL, a boolean, or `unknown`.

    Raises:
        InvalidArgumentError: If value is not None, a bool, or one of
            "null", "true", "false", "unknown"
    """
    keyword = isinstance(value, str) and value in _IS_KEYWORDS
    if not (value is None or isinstance(value, bool) or keyword):
        raise InvalidArgumentError("is", "value", "None, a bool, or 'unknown'", value)
    return where(state, Comparison(Operator.IS, column, value))


def is_distinct(state: RequestState, column: str, value: Any) -> RequestState:
    """`IS DISTINCT FROM`, which treats NULL as a comparable value."""
    return where(state, Comparison(Operator.ISDISTINCT, column, value))


def in_(state: RequestState, column: str, values: Sequence[Any]) -> RequestState:
    """
    Column is one of the given values: `in.(a,b)`.

    Raises:
        InvalidArgumentError: If values is not a list or tuple
    """
    return where(state, Comparison(Operator.IN, column, values))


within = in_


def contains(state: RequestState, column: str, value: str | Sequence[Any] | Mapping) -> RequestState:
    """
    Column (jsonb, array or range) contains every element of value.

    Strings are used verbatim, lists are brace-wrapped (`{a,b}`), and
    mappings are JSON encoded.
    """
    return where(state, Comparison(Operator.CS, column, _collection("contains", value)))


def contained_by(
    state: RequestState, column: str, value: str | Sequence[Any] | Mapping
) -> RequestState:
    """Every element of column is contained by value. Same value rules as `contains`."""
    return where(state, Comparison(Operator.CD, column, _collection("contained_by", value)))


def overlaps(state: RequestState, column: str, value: str | Sequence[Any] | Mapping) -> RequestState:
    """Column and value share at least one element."""
    return where(state, Comparison(Operator.OV, column, _collection("overlaps", value)))


def range_lt(state: RequestState, column: str, range_: str) -> RequestState:
    """Range column is strictly left of range_ (`sl`)."""
    return where(state, Comparison(Operator.SL, column, range_))


def range_gt(state: RequestState, column: str, range_: str) -> RequestState:
    """Range column is strictly right of range_ (`sr`)."""
    return where(state, Comparison(Operator.SR, column, range_))


def range_gte(state: RequestState, column: str, range_: str) -> RequestState:
    """Range column does not extend to the left of range_ (`nxl`)."""
    return where(state, Comparison(Operator.NXL, column, range_))


def range_lte(state: RequestState, column: str, range_: str) -> RequestState:
    """Range column does not extend to the right of range_ (`nxr`)."""
    return where(state, Comparison(Operator.NXR, column, range_))


def range_adjacent(state: RequestState, column: str, range_: str) -> RequestState:
    return where(state, Comparison(Operator.ADJ, column, range_))


def text_search(
    state: RequestState,
    column: str,
    query: str,
    *,
    type: str | None = None,  # noqa: A002
    config: str | None = None,
) -> RequestState:
    """
    Full-text search on a text or tsvector column.

    Args:
        state: Current request
        column: Column to search
        query: Search query text
        type: None for `fts`, or "plain", "phrase", "websearch"
        config: Text search configuration, e.g. "english"

    Example:
        >>> text_search(state, "body", "cat & dog", type="plain", config="english").get_query("body")
        'plfts(english).cat & dog'
    """
    if type not in _TEXT_SEARCH_TYPES:
        raise InvalidArgumentError(
            "text_search", "type", "None, 'plain', 'phrase' or 'websearch'", type
        )
    operator = _TEXT_SEARCH_TYPES[type]
    if config:
        return where(state, TextSearch(operator, column, query, config))
    return where(state, Comparison(operator, column, query))


__all__ = [
    "where",
    "filter",
    "not_",
    "all_of",
    "any_of",
    "match",
    "eq",
    "neq",
    "gt",
    "gte",
    "lt",
    "lte",
    "like",
    "ilike",
    "like_all_of",
    "like_any_of",
    "ilike_all_of",
    "ilike_any_of",
    "regex_match",
    "regex_imatch",
    "is_",
    "is_distinct",
    "in_",
    "within",
    "contains",
    "contained_by",
    "overlaps",
    "range_lt",
    "range_gt",
    "range_gte",
    "range_lte",
    "range_adjacent",
    "text_search",
]
