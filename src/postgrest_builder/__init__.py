"""
postgrest_builder - Request builder for PostgREST APIs.

This library provides:
- Immutable request descriptions built through a fluent QueryBuilder
- A validated condition grammar for filters (not/and/or, all/any, full-text search)
- Select, insert, upsert, update and delete intents with Prefer negotiation
- Ordering, pagination, single-row and media-type transforms
- An execution boundary with pluggable transports and OpenTelemetry tracing
"""

from postgrest_builder._version import __version__
from postgrest_builder.builder import QueryBuilder, from_, seed_request
from postgrest_builder.conditions import (
    And,
    ArrayModifier,
    Between,
    Comparison,
    Condition,
    Not,
    Operator,
    Or,
    Raw,
    TextSearch,
    encode,
    to_condition,
)
from postgrest_builder.context import ClientContext
from postgrest_builder.exceptions import (
    ContractViolationError,
    EncodeError,
    InvalidArgumentError,
    InvalidOperatorError,
    PostgrestAPIError,
    PostgrestBuilderError,
    TransportError,
)
from postgrest_builder.execution import (
    ExecutorConfig,
    JSONBodyEncoder,
    QueryExecutor,
    SchemaHeaderPolicy,
    prepare,
)
from postgrest_builder.intent import Count, Returning, avg, count, max_, min_, sum_
from postgrest_builder.protocols import FilterOps, QueryIntentOps, TransformOps
from postgrest_builder.request import Method, RequestState
from postgrest_builder.response import PostgrestErrorBody, PostgrestResponse, decode_response
from postgrest_builder.transform import MediaType
from postgrest_builder.transport import (
    InMemoryTransport,
    PreparedRequest,
    Transport,
    TransportResponse,
)

__all__ = [
    # Version
    "__version__",
    # Request
    "Method",
    "RequestState",
    # Builder
    "ClientContext",
    "QueryBuilder",
    "from_",
    "seed_request",
    "QueryIntentOps",
    "FilterOps",
    "TransformOps",
    # Conditions
    "Operator",
    "Condition",
    "Comparison",
    "ArrayModifier",
    "TextSearch",
    "Between",
    "Not",
    "And",
    "Or",
    "Raw",
    "encode",
    "to_condition",
    # Intents and transforms
    "Count",
    "Returning",
    "MediaType",
    "sum_",
    "avg",
    "min_",
    "max_",
    "count",
    # Execution
    "ExecutorConfig",
    "SchemaHeaderPolicy",
    "JSONBodyEncoder",
    "prepare",
    "QueryExecutor",
    "PostgrestResponse",
    "PostgrestErrorBody",
    "decode_response",
    # Transport
    "Transport",
    "PreparedRequest",
    "TransportResponse",
    "InMemoryTransport",
    # Exceptions
    "PostgrestBuilderError",
    "ContractViolationError",
    "InvalidOperatorError",
    "InvalidArgumentError",
    "EncodeError",
    "TransportError",
    "PostgrestAPIError",
]
