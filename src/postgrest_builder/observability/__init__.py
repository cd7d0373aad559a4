"""
Observability utilities for postgrest_builder.

Tracing is composition based: the execution boundary receives a Tracer
and never imports OpenTelemetry itself.

Example:
    >>> from postgrest_builder.observability import MockTracer
    >>> executor = QueryExecutor(transport, tracer=MockTracer())
"""

from postgrest_builder.observability.attributes import (
    ATTR_DB_SYSTEM,
    ATTR_ERROR_CODE,
    ATTR_HTTP_METHOD,
    ATTR_HTTP_STATUS_CODE,
    ATTR_RELATION,
    ATTR_SCHEMA,
    DB_SYSTEM_POSTGRESQL,
    SPAN_REQUEST,
)
from postgrest_builder.observability.tracer import (
    MockSpan,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanKindEnum,
    Tracer,
    create_tracer,
)

__all__ = [
    # Tracer
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockSpan",
    "MockTracer",
    "SpanKindEnum",
    "create_tracer",
    # Attributes
    "SPAN_REQUEST",
    "ATTR_DB_SYSTEM",
    "DB_SYSTEM_POSTGRESQL",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_STATUS_CODE",
    "ATTR_RELATION",
    "ATTR_SCHEMA",
    "ATTR_ERROR_CODE",
]
