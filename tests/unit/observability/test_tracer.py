"""
Unit tests for tracer protocol and implementations.

Tests for:
- Tracer Protocol (runtime_checkable)
- NullTracer class
- OpenTelemetryTracer class
- MockTracer class
- create_tracer() factory function
"""

from __future__ import annotations

import contextlib
from typing import Any

import pytest

from postgrest_builder.observability import (
    MockSpan,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanKindEnum,
    Tracer,
    create_tracer,
)


@pytest.fixture(scope="module")
def span_exporter():
    """In-memory exporter installed on the global tracer provider."""
    sdk_trace = pytest.importorskip("opentelemetry.sdk.trace")
    export = pytest.importorskip("opentelemetry.sdk.trace.export")
    in_memory = pytest.importorskip("opentelemetry.sdk.trace.export.in_memory_span_exporter")
    from opentelemetry import trace

    exporter = in_memory.InMemorySpanExporter()
    provider = sdk_trace.TracerProvider()
    provider.add_span_processor(export.SimpleSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return exporter


class TestTracerProtocol:
    """Tests for Tracer protocol."""

    def test_null_tracer_implements_protocol(self):
        assert isinstance(NullTracer(), Tracer)

    def test_otel_tracer_implements_protocol(self):
        assert isinstance(OpenTelemetryTracer(__name__), Tracer)

    def test_mock_tracer_implements_protocol(self):
        assert isinstance(MockTracer(), Tracer)

    def test_custom_implementation_matches_protocol(self):
        """Custom implementations can match the protocol."""

        class CustomTracer:
            def span(self, name: str, attributes: dict[str, Any] | None = None):
                return contextlib.nullcontext()

            @property
            def enabled(self) -> bool:
                return True

            def span_with_kind(
                self,
                name: str,
                kind: SpanKindEnum = SpanKindEnum.INTERNAL,
                attributes: dict[str, Any] | None = None,
            ):
                return contextlib.nullcontext()

        assert isinstance(CustomTracer(), Tracer)

    def test_object_without_methods_does_not_match(self):
        assert not isinstance(object(), Tracer)


class TestNullTracer:
    """Tests for NullTracer."""

    def test_disabled(self):
        assert NullTracer().enabled is False

    def test_span_yields_none(self):
        with NullTracer().span("op", {"k": "v"}) as span:
            assert span is None

    def test_span_with_kind_yields_none(self):
        with NullTracer().span_with_kind("op", SpanKindEnum.CLIENT) as span:
            assert span is None

    def test_exceptions_propagate(self):
        with pytest.raises(RuntimeError):
            with NullTracer().span("op"):
                raise RuntimeError("boom")


class TestOpenTelemetryTracer:
    """Tests for OpenTelemetryTracer."""

    def test_enabled(self):
        assert OpenTelemetryTracer(__name__).enabled is True

    def test_span_without_provider_does_not_fail(self):
        with OpenTelemetryTracer(__name__).span("op", {"k": "v"}) as span:
            assert span is not None

    def test_spans_exported(self, span_exporter):
        span_exporter.clear()
        tracer = OpenTelemetryTracer(__name__)
        with tracer.span_with_kind(
            "postgrest.request", SpanKindEnum.CLIENT, {"postgrest.relation": "users"}
        ) as span:
            span.set_attribute("http.response.status_code", 200)

        from opentelemetry.trace import SpanKind

        (finished,) = span_exporter.get_finished_spans()
        assert finished.name == "postgrest.request"
        assert finished.kind == SpanKind.CLIENT
        assert finished.attributes["postgrest.relation"] == "users"
        assert finished.attributes["http.response.status_code"] == 200

    def test_default_kind_is_internal(self, span_exporter):
        span_exporter.clear()
        with OpenTelemetryTracer(__name__).span("op"):
            pass

        from opentelemetry.trace import SpanKind

        (finished,) = span_exporter.get_finished_spans()
        assert finished.kind == SpanKind.INTERNAL


class TestMockTracer:
    """Tests for MockTracer."""

    def test_records_spans(self):
        tracer = MockTracer()
        with tracer.span("operation", {"key": "value"}):
            pass
        assert tracer.spans == [("operation", {"key": "value"})]
        assert tracer.span_names == ["operation"]

    def test_yields_mock_span(self):
        tracer = MockTracer()
        with tracer.span_with_kind("op", SpanKindEnum.CLIENT) as span:
            assert isinstance(span, MockSpan)
            span.set_attribute("late", 1)
        assert tracer.spans == [("op", {"late": 1})]
        assert tracer.recorded[0].kind is SpanKindEnum.CLIENT

    def test_does_not_mutate_caller_attributes(self):
        attributes = {"a": 1}
        tracer = MockTracer()
        with tracer.span("op", attributes) as span:
            span.set_attribute("b", 2)
        assert attributes == {"a": 1}

    def test_record_exception(self):
        tracer = MockTracer()
        error = ValueError("x")
        with tracer.span("op") as span:
            span.record_exception(error)
        assert tracer.recorded[0].exceptions == [error]

    def test_clear(self):
        tracer = MockTracer()
        with tracer.span("op"):
            pass
        tracer.clear()
        assert tracer.spans == []
        assert tracer.recorded == []

    def test_enabled(self):
        assert MockTracer().enabled is True


class TestCreateTracer:
    """Tests for create_tracer()."""

    def test_enabled(self):
        assert isinstance(create_tracer(__name__, enable_tracing=True), OpenTelemetryTracer)

    def test_disabled(self):
        assert isinstance(create_tracer(__name__, enable_tracing=False), NullTracer)

    def test_default_is_enabled(self):
        assert isinstance(create_tracer(__name__), OpenTelemetryTracer)
