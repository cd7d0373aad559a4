"""
Standard span attributes for postgrest_builder.

Names follow OpenTelemetry semantic conventions where one exists.

Example:
    >>> from postgrest_builder.observability.attributes import ATTR_RELATION, ATTR_HTTP_METHOD
    >>>
    >>> with tracer.span_with_kind(
    ...     SPAN_REQUEST,
    ...     SpanKindEnum.CLIENT,
    ...     {ATTR_RELATION: "users", ATTR_HTTP_METHOD: "GET"},
    ... ):
    ...     pass
"""

# =============================================================================
# Span Names
# =============================================================================

SPAN_REQUEST = "postgrest.request"
"""Span wrapping one request sent through a Transport."""

# =============================================================================
# Database Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier; always 'postgresql'."""

DB_SYSTEM_POSTGRESQL = "postgresql"

# =============================================================================
# HTTP Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_HTTP_METHOD = "http.request.method"
"""HTTP method of the outbound request."""

ATTR_HTTP_STATUS_CODE = "http.response.status_code"
"""Status code of the response (integer)."""

# =============================================================================
# PostgREST Attributes
# =============================================================================

ATTR_RELATION = "postgrest.relation"
"""Table or view the request targets."""

ATTR_SCHEMA = "postgrest.schema"
"""Database schema the request targets."""

ATTR_ERROR_CODE = "postgrest.error.code"
"""Error code from a PostgREST error body (e.g., 'PGRST116')."""


__all__ = [
    "SPAN_REQUEST",
    "ATTR_DB_SYSTEM",
    "DB_SYSTEM_POSTGRESQL",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_STATUS_CODE",
    "ATTR_RELATION",
    "ATTR_SCHEMA",
    "ATTR_ERROR_CODE",
]
