"""
Shared pytest fixtures for the postgrest_builder tests.

This module provides:
- Client configuration fixtures (client_context)
- Request fixtures (base_request, query)
- Execution fixtures (transport, mock_tracer, executor)
"""

from __future__ import annotations

import pytest

from postgrest_builder import (
    ClientContext,
    ExecutorConfig,
    InMemoryTransport,
    QueryBuilder,
    QueryExecutor,
    RequestState,
    from_,
    seed_request,
)
from postgrest_builder.observability import MockTracer

BASE_URL = "http://localhost:3000"
API_KEY = "anon-key"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def client_context() -> ClientContext:
    """Client context pointing at a local PostgREST instance."""
    return ClientContext(base_url=BASE_URL, api_key=API_KEY)


# ============================================================================
# Request Fixtures
# ============================================================================


@pytest.fixture
def base_request(client_context: ClientContext) -> RequestState:
    """Seeded request for the `users` relation."""
    return seed_request(client_context, "users")


@pytest.fixture
def query(client_context: ClientContext) -> QueryBuilder:
    """QueryBuilder for the `users` relation."""
    return from_(client_context, "users")


# ============================================================================
# Execution Fixtures
# ============================================================================


@pytest.fixture
def transport() -> InMemoryTransport:
    """Fresh in-memory transport."""
    return InMemoryTransport()


@pytest.fixture
def mock_tracer() -> MockTracer:
    """Tracer recording spans for assertions."""
    return MockTracer()


@pytest.fixture
def executor(transport: InMemoryTransport, mock_tracer: MockTracer) -> QueryExecutor:
    """Executor wired to the in-memory transport and mock tracer."""
    return QueryExecutor(transport, ExecutorConfig(), tracer=mock_tracer)
