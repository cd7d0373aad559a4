"""
Execution boundary.

Everything between a finished RequestState and a decoded response:

- SchemaHeaderPolicy: turns the logical schema into profile headers
- JSONBodyEncoder: serializes the body
- prepare(): builds the PreparedRequest (pure, no I/O)
- QueryExecutor: sends it through a Transport and decodes the answer

Example:
    >>> from postgrest_builder import ClientContext, QueryExecutor, from_
    >>> from postgrest_builder.transport import InMemoryTransport
    >>>
    >>> executor = QueryExecutor(InMemoryTransport())
    >>> response = await executor.execute(from_(ctx, "users").select("*", returning=True))
    >>> response.data
    []
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from postgrest_builder.builder import QueryBuilder
from postgrest_builder.exceptions import EncodeError, TransportError
from postgrest_builder.observability import (
    ATTR_DB_SYSTEM,
    ATTR_ERROR_CODE,
    ATTR_HTTP_METHOD,
    ATTR_HTTP_STATUS_CODE,
    ATTR_RELATION,
    ATTR_SCHEMA,
    DB_SYSTEM_POSTGRESQL,
    SPAN_REQUEST,
    SpanKindEnum,
    Tracer,
    create_tracer,
)
from postgrest_builder.request import Method, RequestState
from postgrest_builder.response import PostgrestResponse, decode_response, is_error_status
from postgrest_builder.serialization import json_dumps
from postgrest_builder.transport.interface import PreparedRequest, Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutorConfig:
    """
    Settings for QueryExecutor.

    Attributes:
        raise_on_error: Raise PostgrestAPIError for error responses instead
            of returning them with `response.error` set
        enable_tracing: Create an OpenTelemetry tracer when none is injected
    """

    raise_on_error: bool = True
    enable_tracing: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not isinstance(self.raise_on_error, bool):
            raise ValueError(f"raise_on_error must be a bool, got {self.raise_on_error!r}")
        if not isinstance(self.enable_tracing, bool):
            raise ValueError(f"enable_tracing must be a bool, got {self.enable_tracing!r}")


class SchemaHeaderPolicy:
    """
    Selects the profile header that carries the schema.

    Read methods (GET, HEAD) send `accept-profile`; write methods send
    `content-profile`. Without a schema the headers are left alone.
    """

    READ_HEADER = "accept-profile"
    WRITE_HEADER = "content-profile"

    def header_for(self, method: Method | str) -> str:
        return self.READ_HEADER if Method.coerce(method).is_read else self.WRITE_HEADER

    def apply(
        self,
        method: Method | str,
        schema: str | None,
        headers: Mapping[str, str],
    ) -> dict[str, str]:
        """Return a copy of headers with the profile header for method set."""
        result = dict(headers)
        if schema:
            result[self.header_for(method)] = schema
        return result


class JSONBodyEncoder:
    """Encodes request bodies as compact UTF-8 JSON."""

    def encode(self, value: Any) -> bytes:
        """
        Serialize a body.

        Raises:
            EncodeError: If the value contains something JSON cannot represent
        """
        try:
            return json_dumps(value).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodeError(type(value).__name__, str(e)) from e


def relation_of(state: RequestState) -> str:
    """Relation name, taken from the last path segment of the URL."""
    return state.url.rstrip("/").rsplit("/", 1)[-1]


def prepare(
    state: RequestState,
    *,
    policy: SchemaHeaderPolicy | None = None,
    encoder: JSONBodyEncoder | None = None,
) -> PreparedRequest:
    """
    Build the request that will be handed to a Transport.

    The query string keeps the order in which parameters were added.
    Requests without a body (reads, deletes) get `body=None`.

    Raises:
        EncodeError: If the body cannot be serialized
    """
    policy = policy or SchemaHeaderPolicy()
    encoder = encoder or JSONBodyEncoder()
    query_string = state.query_string
    url = f"{state.url}?{query_string}" if query_string else state.url
    body = None if state.body is None else encoder.encode(state.body)
    return PreparedRequest(
        method=state.method.value,
        url=url,
        headers=policy.apply(state.method, state.schema, state.headers),
        body=body,
    )


class QueryExecutor:
    """
    Sends built queries through a Transport and decodes the responses.

    Example:
        >>> executor = QueryExecutor(transport, ExecutorConfig(raise_on_error=False))
        >>> response = await executor.execute(query)
        >>> if not response.ok:
        ...     print(response.error.code)
    """

    def __init__(
        self,
        transport: Transport,
        config: ExecutorConfig | None = None,
        *,
        tracer: Tracer | None = None,
        policy: SchemaHeaderPolicy | None = None,
        encoder: JSONBodyEncoder | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            transport: Transport performing the HTTP exchange
            config: Executor settings (defaults to ExecutorConfig())
            tracer: Optional custom Tracer instance. If not provided, one is
                   created based on config.enable_tracing.
            policy: Schema header policy (defaults to SchemaHeaderPolicy())
            encoder: Body encoder (defaults to JSONBodyEncoder())
        """
        self._transport = transport
        self._config = config or ExecutorConfig()
        self._tracer = tracer or create_tracer(__name__, self._config.enable_tracing)
        self._policy = policy or SchemaHeaderPolicy()
        self._encoder = encoder or JSONBodyEncoder()

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    async def execute(self, query: RequestState | QueryBuilder) -> PostgrestResponse:
        """
        Execute a query.

        Args:
            query: A RequestState or a QueryBuilder wrapping one

        Returns:
            Decoded response

        Raises:
            EncodeError: If the body cannot be serialized
            TransportError: If the transport fails; OS-level errors are
                wrapped in TransportError
            PostgrestAPIError: On an error response when raise_on_error is set
        """
        state = query.request if isinstance(query, QueryBuilder) else query
        relation = relation_of(state)
        log_extra = {
            "relation": relation,
            "method": state.method.value,
            "schema": state.schema,
        }
        attributes = {
            ATTR_DB_SYSTEM: DB_SYSTEM_POSTGRESQL,
            ATTR_HTTP_METHOD: state.method.value,
            ATTR_RELATION: relation,
        }
        if state.schema:
            attributes[ATTR_SCHEMA] = state.schema

        with self._tracer.span_with_kind(SPAN_REQUEST, SpanKindEnum.CLIENT, attributes) as span:
            prepared = prepare(state, policy=self._policy, encoder=self._encoder)
            logger.debug(f"Dispatching {prepared.method} {relation}", extra=log_extra)

            try:
                raw = await self._transport.execute(prepared)
            except TransportError as e:
                logger.error(
                    f"Transport failed for {prepared.method} {relation}: {e}",
                    exc_info=True,
                    extra=log_extra,
                )
                raise
            except OSError as e:
                logger.error(
                    f"Transport failed for {prepared.method} {relation}: {e}",
                    exc_info=True,
                    extra=log_extra,
                )
                raise TransportError(str(e)) from e

            if span:
                span.set_attribute(ATTR_HTTP_STATUS_CODE, raw.status)
            logger.debug(
                f"Received {raw.status} for {prepared.method} {relation}",
                extra={**log_extra, "status": raw.status},
            )
            if is_error_status(raw.status):
                logger.warning(
                    f"PostgREST returned {raw.status} for {prepared.method} {relation}",
                    extra={**log_extra, "status": raw.status},
                )

            response = decode_response(raw.status, raw.headers, raw.body, raise_on_error=False)
            if response.error is not None:
                if span and response.error.code:
                    span.set_attribute(ATTR_ERROR_CODE, response.error.code)
                if self._config.raise_on_error:
                    raise response.error
            return response


__all__ = [
    "ExecutorConfig",
    "SchemaHeaderPolicy",
    "JSONBodyEncoder",
    "relation_of",
    "prepare",
    "QueryExecutor",
]
