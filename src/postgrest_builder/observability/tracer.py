"""
Tracer protocol and implementations for composition-based tracing.

Components that perform I/O accept a Tracer as a dependency instead of
talking to OpenTelemetry directly, which keeps them easy to test.

Example:
    >>> from postgrest_builder.observability import create_tracer, NullTracer
    >>>
    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>>
    >>> class MyExecutor:
    ...     def __init__(self, tracer: Tracer | None = None):
    ...         self._tracer = tracer or NullTracer()
    ...
    ...     async def run(self, relation: str) -> None:
    ...         with self._tracer.span("my_executor.run", {"postgrest.relation": relation}):
    ...             await self._do_run(relation)
"""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind


class SpanKindEnum(Enum):
    """
    Span kinds for distributed tracing.

    Maps onto OpenTelemetry's SpanKind.

    Values:
        INTERNAL: Default span kind for internal operations
        CLIENT: Outbound calls, such as a request to PostgREST
        SERVER: Handling an inbound request
    """

    INTERNAL = "internal"
    CLIENT = "client"
    SERVER = "server"


_OTEL_KINDS = {
    SpanKindEnum.INTERNAL: SpanKind.INTERNAL,
    SpanKindEnum.CLIENT: SpanKind.CLIENT,
    SpanKindEnum.SERVER: SpanKind.SERVER,
}


@runtime_checkable
class Tracer(Protocol):
    """
    Protocol for tracers that can create tracing spans.

    Implementations:
    - NullTracer: No-op tracer for when tracing is disabled
    - OpenTelemetryTracer: Wrapper around the OpenTelemetry tracer
    - MockTracer: Records spans for assertions in tests
    """

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Any]:
        """
        Create a tracing span context manager.

        Args:
            name: Span name (e.g., "postgrest.request")
            attributes: Span attributes (optional)

        Returns:
            Context manager that yields a span, or None when disabled
        """
        ...

    @property
    def enabled(self) -> bool:
        """True if tracing is active and will create real spans."""
        ...

    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Any]:
        """
        Create a tracing span context manager with a SpanKind.

        Example:
            >>> with tracer.span_with_kind("postgrest.request", SpanKindEnum.CLIENT) as span:
            ...     response = await transport.execute(request)
            ...     if span:
            ...         span.set_attribute("http.response.status_code", response.status)
        """
        ...


class NullTracer:
    """
    No-op tracer implementation for when tracing is disabled.

    Example:
        >>> tracer = NullTracer()
        >>> with tracer.span("operation"):  # Does nothing
        ...     do_work()
        >>> tracer.enabled  # False
    """

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[None, None, None]:
        """Create a no-op span context (yields None)."""
        yield None

    @property
    def enabled(self) -> bool:
        return False

    @contextlib.contextmanager
    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[None, None, None]:
        yield None


class OpenTelemetryTracer:
    """
    OpenTelemetry tracer implementation.

    Spans go to whatever TracerProvider the application configured; with
    none configured the API hands out non-recording spans.

    Args:
        tracer_name: Name for the tracer (typically __name__)
    """

    def __init__(self, tracer_name: str) -> None:
        self._tracer = trace.get_tracer(tracer_name)

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span]:
        """Create an OpenTelemetry span context."""
        return self._tracer.start_as_current_span(name, attributes=attributes or {})

    @property
    def enabled(self) -> bool:
        return True

    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Span]:
        """Create an OpenTelemetry span context with SpanKind."""
        return self._tracer.start_as_current_span(
            name,
            kind=_OTEL_KINDS.get(kind, SpanKind.INTERNAL),
            attributes=attributes or {},
        )


class MockSpan:
    """Span stand-in that records attributes and exceptions set on it."""

    def __init__(self, name: str, kind: SpanKindEnum, attributes: dict[str, Any]) -> None:
        self.name = name
        self.kind = kind
        self.attributes = attributes
        self.exceptions: list[BaseException] = []

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def record_exception(self, exception: BaseException) -> None:
        self.exceptions.append(exception)


class MockTracer:
    """
    Mock tracer for testing that records span information.

    Attributes set on a yielded span after it opens show up in `spans`.

    Example:
        >>> tracer = MockTracer()
        >>> with tracer.span("operation", {"key": "value"}):
        ...     pass
        >>> assert tracer.spans == [("operation", {"key": "value"})]
        >>> assert tracer.span_names == ["operation"]
    """

    def __init__(self) -> None:
        self.spans: list[tuple[str, dict[str, Any]]] = []
        self.recorded: list[MockSpan] = []

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[MockSpan, None, None]:
        """Record span and yield a MockSpan."""
        with self.span_with_kind(name, SpanKindEnum.INTERNAL, attributes) as span:
            yield span

    @property
    def enabled(self) -> bool:
        """Returns True to enable attribute computation in tests."""
        return True

    @property
    def span_names(self) -> list[str]:
        return [name for name, _ in self.spans]

    def clear(self) -> None:
        """Clear recorded spans."""
        self.spans.clear()
        self.recorded.clear()

    @contextlib.contextmanager
    def span_with_kind(
        self,
        name: str,
        kind: SpanKindEnum = SpanKindEnum.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[MockSpan, None, None]:
        """Record span with kind and yield a MockSpan."""
        span = MockSpan(name, kind, dict(attributes or {}))
        self.spans.append((name, span.attributes))
        self.recorded.append(span)
        yield span


def create_tracer(
    name: str,
    enable_tracing: bool = True,
) -> Tracer:
    """
    Factory function to create the appropriate tracer.

    Args:
        name: Tracer name (typically __name__)
        enable_tracing: Whether tracing should be enabled (default True)

    Returns:
        OpenTelemetryTracer if enabled, NullTracer otherwise

    Example:
        >>> def __init__(self, tracer: Tracer | None = None, enable_tracing: bool = True):
        ...     self._tracer = tracer or create_tracer(__name__, enable_tracing)
    """
    if enable_tracing:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockSpan",
    "MockTracer",
    "SpanKindEnum",
    "create_tracer",
]
