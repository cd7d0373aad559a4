"""
Condition grammar for PostgREST filters.

Conditions are immutable, recursive expression nodes that encode to the
textual filter syntax PostgREST understands. They are used in two places:

- nested inside logical groups (`and=(...)`, `or=(...)`), where each node
  renders as `column.op.value` via `encode()`;
- as a single top-level query parameter, where `to_param()` splits the
  node into a `(key, value)` pair such as `("age", "gt.18")`.

Operators are drawn from a closed vocabulary (`Operator`). Unknown tokens
are rejected when a node is constructed, never when it is encoded.

No escaping or quoting is performed: callers are responsible for
sanitizing values that contain reserved characters (`,`, `.`, `(`, `)`).

Example:
    >>> from postgrest_builder.conditions import And, Comparison, Not, encode
    >>> encode(Not(Comparison("eq", "status", "active")))
    'not.status.eq.active'
    >>> encode(And([("gt", "age", 18), ("eq", "status", "active")]))
    'and(age.gt.18,status.eq.active)'
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from postgrest_builder.exceptions import InvalidArgumentError, InvalidOperatorError
from postgrest_builder.serialization import json_dumps

logger = logging.getLogger(__name__)


class Operator(Enum):
    """
    Closed vocabulary of PostgREST operator tokens.

    Comparison: eq, neq, gt, gte, lt, lte
    Pattern: like, ilike, match (regex), imatch (case-insensitive regex)
    Membership and identity: in, is, isdistinct
    Full-text search: fts, plfts, phfts, wfts
    Array/range: cs, cd, ov, sl, sr, nxr, nxl, adj
    Structural: not, and, or, all, any, between
    """

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"
    MATCH = "match"
    IMATCH = "imatch"
    IN = "in"
    IS = "is"
    ISDISTINCT = "isdistinct"
    FTS = "fts"
    PLFTS = "plfts"
    PHFTS = "phfts"
    WFTS = "wfts"
    CS = "cs"
    CD = "cd"
    OV = "ov"
    SL = "sl"
    SR = "sr"
    NXR = "nxr"
    NXL = "nxl"
    ADJ = "adj"
    NOT = "not"
    AND = "and"
    OR = "or"
    ALL = "all"
    ANY = "any"
    BETWEEN = "between"

    @classmethod
    def parse(cls, token: Operator | str) -> Operator:
        """
        Validate an operator token.

        Args:
            token: Operator member or its wire token (e.g. "gte")

        Returns:
            The matching Operator

        Raises:
            InvalidOperatorError: If the token is not in the vocabulary
        """
        if isinstance(token, Operator):
            return token
        try:
            return cls(token)
        except ValueError:
            logger.debug(
                f"Rejecting unknown operator token {token!r}",
                extra={"operator": repr(token)},
            )
            raise InvalidOperatorError(token) from None


# Operators that accept an all/any modifier over a list of values
MODIFIABLE_OPERATORS = frozenset(
    {
        Operator.EQ,
        Operator.LIKE,
        Operator.ILIKE,
        Operator.GT,
        Operator.GTE,
        Operator.LT,
        Operator.LTE,
        Operator.MATCH,
        Operator.IMATCH,
    }
)
TEXT_SEARCH_OPERATORS = frozenset({Operator.FTS, Operator.PLFTS, Operator.PHFTS, Operator.WFTS})
LOGICAL_OPERATORS = frozenset({Operator.NOT, Operator.AND, Operator.OR})
MODIFIERS = frozenset({Operator.ALL, Operator.ANY})


def format_value(value: Any) -> str:
    """
    Render a Python value the way it appears inside a filter.

    None becomes `null`, booleans `true`/`false`, mappings compact JSON,
    lists and tuples `[a,b]`; anything else uses `str()`.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return format_value(value.value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return json_dumps(value)
    if isinstance(value, (list, tuple)):
        return f"[{csv(value)}]"
    return str(value)


def csv(values: Iterable[Any]) -> str:
    """Join formatted values with commas, preserving order."""
    return ",".join(format_value(v) for v in values)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _check_column(operation: str, column: Any) -> None:
    if not isinstance(column, str) or not column:
        raise InvalidArgumentError(operation, "column", "a non-empty string", column)


class Condition:
    """
    Base class for filter condition nodes.

    Factory class methods cover the common shapes:

    Example:
        >>> c = Condition.or_([Condition.eq("status", "active"), Condition.gt("age", 18)])
        >>> str(c)
        'or(status.eq.active,age.gt.18)'
    """

    __slots__ = ()

    def __str__(self) -> str:
        return encode(self)

    @staticmethod
    def eq(column: str, value: Any) -> Comparison:
        return Comparison(Operator.EQ, column, value)

    @staticmethod
    def neq(column: str, value: Any) -> Comparison:
        return Comparison(Operator.NEQ, column, value)

    @staticmethod
    def gt(column: str, value: Any) -> Comparison:
        return Comparison(Operator.GT, column, value)

    @staticmethod
    def gte(column: str, value: Any) -> Comparison:
        return Comparison(Operator.GTE, column, value)

    @staticmethod
    def lt(column: str, value: Any) -> Comparison:
        return Comparison(Operator.LT, column, value)

    @staticmethod
    def lte(column: str, value: Any) -> Comparison:
        return Comparison(Operator.LTE, column, value)

    @staticmethod
    def like(column: str, pattern: str) -> Comparison:
        return Comparison(Operator.LIKE, column, pattern)

    @staticmethod
    def ilike(column: str, pattern: str) -> Comparison:
        return Comparison(Operator.ILIKE, column, pattern)

    @staticmethod
    def in_(column: str, values: Sequence[Any]) -> Comparison:
        """Membership test, rendered as `column.in.(a,b)`."""
        return Comparison(Operator.IN, column, values)

    @staticmethod
    def is_(column: str, value: bool | None) -> Comparison:
        """Identity test; None renders as `null`."""
        return Comparison(Operator.IS, column, value)

    @staticmethod
    def between(column: str, low: Any, high: Any) -> Between:
        return Between(column, low, high)

    @staticmethod
    def not_(condition: Any) -> Not:
        return Not(condition)

    @staticmethod
    def and_(conditions: Iterable[Any]) -> And:
        return And(conditions)

    @staticmethod
    def or_(conditions: Iterable[Any]) -> Or:
        return Or(conditions)


@dataclass(frozen=True)
class Comparison(Condition):
    """
    A single operator applied to one column and a scalar value.

    `in` requires a list of values; `is` renders None as `null`. Logical
    operators, all/any modifiers and `between` have dedicated node types
    and are rejected here.

    Attributes:
        operator: Operator token (validated)
        column: Column name
        value: Scalar value, or list of values for `in`
    """

    operator: Operator
    column: str
    value: Any

    def __post_init__(self) -> None:
        op = Operator.parse(self.operator)
        if op in LOGICAL_OPERATORS or op in MODIFIERS:
            raise InvalidOperatorError(op.value, "use Not, And, Or or ArrayModifier instead")
        if op is Operator.BETWEEN:
            raise InvalidOperatorError(op.value, "use Between for range bounds")
        _check_column(op.value, self.column)
        if op is Operator.IN:
            if not _is_list(self.value):
                raise InvalidArgumentError("in", "value", "a list", self.value)
            object.__setattr__(self, "value", tuple(self.value))
        object.__setattr__(self, "operator", op)


@dataclass(frozen=True)
class ArrayModifier(Comparison):
    """
    An operator applied with an `all` or `any` quantifier over a list.

    Rendered as `column=op(all).{a,b}`.

    Attributes:
        modifier: Operator.ALL or Operator.ANY
    """

    modifier: Operator = Operator.ANY

    def __post_init__(self) -> None:
        op = Operator.parse(self.operator)
        if op not in MODIFIABLE_OPERATORS:
            raise InvalidOperatorError(op.value, "does not accept all/any modifiers")
        modifier = Operator.parse(self.modifier)
        if modifier not in MODIFIERS:
            raise InvalidOperatorError(modifier.value, "modifier must be 'all' or 'any'")
        _check_column(op.value, self.column)
        if not _is_list(self.value):
            raise InvalidArgumentError(f"{op.value}({modifier.value})", "values", "a list", self.value)
        object.__setattr__(self, "operator", op)
        object.__setattr__(self, "modifier", modifier)
        object.__setattr__(self, "value", tuple(self.value))


@dataclass(frozen=True)
class TextSearch(Comparison):
    """
    Full-text search with an explicit text search configuration.

    Rendered as `column=op(language).query`. Without a language the node
    behaves like a plain Comparison.
    """

    language: str | None = None

    def __post_init__(self) -> None:
        op = Operator.parse(self.operator)
        if op not in TEXT_SEARCH_OPERATORS:
            raise InvalidOperatorError(op.value, "not a full-text search operator")
        _check_column(op.value, self.column)
        object.__setattr__(self, "operator", op)


@dataclass(frozen=True)
class Between(Condition):
    """Inclusive bounds on a column, rendered as `column.between.[low,high]`."""

    column: str
    low: Any
    high: Any

    def __post_init__(self) -> None:
        _check_column("between", self.column)


@dataclass(frozen=True)
class Not(Condition):
    """Negation of another condition, rendered as `not.<condition>`."""

    condition: Condition

    def __post_init__(self) -> None:
        object.__setattr__(self, "condition", to_condition(self.condition))


@dataclass(frozen=True)
class And(Condition):
    """All nested conditions must hold. An empty group renders as `and()`."""

    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", _to_conditions("and", self.conditions))


@dataclass(frozen=True)
class Or(Condition):
    """At least one nested condition must hold. An empty group renders as `or()`."""

    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", _to_conditions("or", self.conditions))


@dataclass(frozen=True)
class Raw(Condition):
    """A pre-encoded condition string, used verbatim."""

    text: str


def _to_conditions(operation: str, items: Any) -> tuple[Condition, ...]:
    if isinstance(items, (str, Mapping)) or not isinstance(items, Iterable):
        raise InvalidArgumentError(operation, "conditions", "a list of conditions", items)
    return tuple(to_condition(item) for item in items)


def to_condition(obj: Any) -> Condition:
    """
    Coerce a condition-like value into a Condition node.

    Accepted forms:
        - Condition instances (returned unchanged)
        - strings, treated as pre-encoded conditions
        - ("not", condition)
        - ("and", [conditions]) / ("or", [conditions])
        - ("between", column, [low, high])
        - (op, column, value)
        - (op, column, values, {"all": True}) or {"any": True}
        - (fts_op, column, query, {"lang": "english"})

    Raises:
        InvalidOperatorError: If a tuple names an unknown operator
        InvalidArgumentError: If the value has none of the shapes above
    """
    if isinstance(obj, Condition):
        return obj
    if isinstance(obj, str):
        return Raw(obj)
    if isinstance(obj, tuple) and obj:
        head, rest = Operator.parse(obj[0]), obj[1:]
        if head is Operator.NOT and len(rest) == 1:
            return Not(rest[0])
        if head is Operator.AND and len(rest) == 1:
            return And(rest[0])
        if head is Operator.OR and len(rest) == 1:
            return Or(rest[0])
        if head is Operator.BETWEEN and len(rest) == 2:
            column, bounds = rest
            if not _is_list(bounds) or len(bounds) != 2:
                raise InvalidArgumentError("between", "bounds", "a list of two values", bounds)
            return Between(column, bounds[0], bounds[1])
        if len(rest) == 2:
            return Comparison(head, rest[0], rest[1])
        if len(rest) == 3 and isinstance(rest[2], Mapping):
            return _with_options(head, rest[0], rest[1], rest[2])
    raise InvalidArgumentError(
        "to_condition", "condition", "a Condition, a string, or a condition tuple", obj
    )


def _with_options(op: Operator, column: str, value: Any, options: Mapping[str, Any]) -> Condition:
    use_all, use_any = bool(options.get("all")), bool(options.get("any"))
    language = options.get("lang") or options.get("config")
    if use_all and use_any:
        raise InvalidArgumentError(op.value, "options", "only one of all/any", dict(options))
    if use_all or use_any:
        return ArrayModifier(op, column, value, Operator.ALL if use_all else Operator.ANY)
    if language is not None:
        return TextSearch(op, column, value, language)
    return Comparison(op, column, value)


def operand(condition: Condition) -> str:
    """
    Render the right-hand side of a column-scoped condition.

    This is the part that follows `column=` in a query parameter, e.g.
    `gt.18` or `eq(any).{a,b}`.

    Raises:
        InvalidArgumentError: If the condition is not scoped to a column
    """
    if isinstance(condition, ArrayModifier):
        op, mod = condition.operator.value, condition.modifier.value
        return f"{op}({mod}).{{{csv(condition.value)}}}"
    if isinstance(condition, TextSearch) and condition.language:
        return f"{condition.operator.value}({condition.language}).{condition.value}"
    if isinstance(condition, Comparison):
        if condition.operator is Operator.IN:
            return f"in.({csv(condition.value)})"
        return f"{condition.operator.value}.{format_value(condition.value)}"
    if isinstance(condition, Between):
        return f"between.[{format_value(condition.low)},{format_value(condition.high)}]"
    if isinstance(condition, Not):
        return f"not.{operand(condition.condition)}"
    raise InvalidArgumentError("operand", "condition", "a column-scoped condition", condition)


def encode(condition: Condition) -> str:
    """
    Encode a condition to PostgREST's nested filter syntax.

    Example:
        >>> encode(Or([("eq", "status", "active"), ("and", [("lt", "age", 18)])]))
        'or(status.eq.active,and(age.lt.18))'
    """
    if isinstance(condition, Raw):
        return condition.text
    if isinstance(condition, Not):
        return f"not.{encode(condition.condition)}"
    if isinstance(condition, And):
        return f"and({','.join(encode(c) for c in condition.conditions)})"
    if isinstance(condition, Or):
        return f"or({','.join(encode(c) for c in condition.conditions)})"
    if isinstance(condition, ArrayModifier):
        return f"{condition.column}={operand(condition)}"
    if isinstance(condition, TextSearch) and condition.language:
        return f"{condition.column}={operand(condition)}"
    if isinstance(condition, (Comparison, Between)):
        return f"{condition.column}.{operand(condition)}"
    raise InvalidArgumentError("encode", "condition", "a Condition", condition)


def group(conditions: Iterable[Any]) -> str:
    """Encode a list of condition-likes as a parenthesised group: `(a,b)`."""
    return f"({','.join(encode(c) for c in _to_conditions('group', conditions))})"


def _is_group(condition: Condition) -> bool:
    if isinstance(condition, Not):
        return _is_group(condition.condition)
    return isinstance(condition, (And, Or))


def to_param(condition: Condition) -> tuple[str, str]:
    """
    Split a condition into a top-level query parameter.

    Column-scoped conditions use the column as key; logical groups use
    `and`/`or` (prefixed with `not.` when negated).

    Example:
        >>> to_param(Comparison("gt", "age", 18))
        ('age', 'gt.18')
        >>> to_param(Or([("eq", "a", 1), ("eq", "b", 2)]))
        ('or', '(a.eq.1,b.eq.2)')
    """
    if isinstance(condition, And):
        return "and", group(condition.conditions)
    if isinstance(condition, Or):
        return "or", group(condition.conditions)
    if isinstance(condition, Not):
        key, value = to_param(condition.condition)
        if _is_group(condition.condition):
            return f"not.{key}", value
        return key, f"not.{value}"
    if isinstance(condition, (Comparison, Between)):
        return condition.column, operand(condition)
    raise InvalidArgumentError(
        "to_param", "condition", "a column-scoped or logical condition", condition
    )


__all__ = [
    "Operator",
    "MODIFIABLE_OPERATORS",
    "TEXT_SEARCH_OPERATORS",
    "LOGICAL_OPERATORS",
    "MODIFIERS",
    "Condition",
    "Comparison",
    "ArrayModifier",
    "TextSearch",
    "Between",
    "Not",
    "And",
    "Or",
    "Raw",
    "format_value",
    "csv",
    "to_condition",
    "operand",
    "encode",
    "group",
    "to_param",
]
