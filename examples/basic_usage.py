"""
Basic Usage Example

This example demonstrates the fundamental concepts of the builder:
- Configuring a client context
- Building read and write queries fluently
- Composing conditions with not/and/or
- Executing requests through a transport

No PostgREST server is needed; the InMemoryTransport replays canned
responses and records what would have been sent.

Run with: python examples/basic_usage.py
"""

import asyncio
from datetime import date

from pydantic import BaseModel

from postgrest_builder import (
    ClientContext,
    Condition,
    ExecutorConfig,
    InMemoryTransport,
    QueryExecutor,
    from_,
    prepare,
    sum_,
)

# =============================================================================
# Step 1: Describe the rows
# =============================================================================
# Pydantic models can be used directly as insert and update payloads.


class Order(BaseModel):
    """An order row."""

    customer: str
    amount: float
    placed_on: date


# =============================================================================
# Step 2: Configure the client
# =============================================================================

ctx = ClientContext(base_url="http://localhost:3000", api_key="anon-key")


def show(title: str, builder) -> None:
    prepared = prepare(builder.request)
    print(f"\n{title}")
    print(f"   {prepared.method} {prepared.url}")
    if "prefer" in prepared.headers:
        print(f"   prefer: {prepared.headers['prefer']}")
    if prepared.headers.get("accept") != "*/*":
        print(f"   accept: {prepared.headers['accept']}")
    if prepared.body:
        print(f"   body: {prepared.body.decode()}")


async def main():
    """Run the example."""
    print("=" * 60)
    print("PostgREST Builder Basic Usage Example")
    print("=" * 60)

    # -------------------------------------------------------------------------
    # Building queries (pure, no I/O)
    # -------------------------------------------------------------------------
    show(
        "1. Recent open orders, newest first",
        from_(ctx, "orders")
        .select(["id", "customer", "amount"], returning=True)
        .eq("status", "open")
        .order("placed_on")
        .range(0, 24),
    )

    show(
        "2. Composite condition",
        from_(ctx, "orders")
        .select("*", returning=True)
        .any_of(
            [
                Condition.gt("amount", 1000),
                Condition.and_(
                    [Condition.eq("priority", "high"), Condition.not_(Condition.is_("shipped_on", None))]
                ),
            ]
        ),
    )

    show(
        "3. Insert a model",
        from_(ctx, "orders").insert(
            Order(customer="Ada", amount=42.5, placed_on=date(2024, 5, 1)),
            returning="minimal",
        ),
    )

    show(
        "4. Upsert and return selected columns",
        from_(ctx, "customers")
        .upsert({"email": "ada@example.com", "name": "Ada"}, on_conflict="email")
        .returning(["id", "email"]),
    )

    show(
        "5. Aggregate per customer as CSV",
        from_(ctx, "orders").select(["customer", sum_("amount", as_="total")], returning=True).csv(),
    )

    show(
        "6. Explain a delete inside a rolled-back transaction",
        from_(ctx, "orders").delete().lt("placed_on", date(2020, 1, 1)).rollback().explain(analyze=True),
    )

    # -------------------------------------------------------------------------
    # Executing queries
    # -------------------------------------------------------------------------
    transport = InMemoryTransport()
    executor = QueryExecutor(transport, ExecutorConfig(enable_tracing=False, raise_on_error=False))

    print("\n7. Executing a paged read")
    transport.respond_json(
        200,
        [{"id": 1, "customer": "Ada"}, {"id": 2, "customer": "Grace"}],
        headers={"content-range": "0-1/57"},
    )
    response = await executor.execute(
        from_(ctx, "orders").select(["id", "customer"], returning=True).limit(2)
    )
    print(f"   Rows: {response.data}")
    print(f"   Total count: {response.count}")
    print(f"   Profile header: accept-profile={transport.last_request.headers['accept-profile']}")

    print("\n8. Handling an error response")
    transport.respond_json(
        406,
        {
            "code": "PGRST116",
            "details": "The result contains 0 rows",
            "hint": None,
            "message": "JSON object requested, multiple (or no) rows returned",
        },
    )
    response = await executor.execute(from_(ctx, "orders").select("*", returning=True).eq("id", 999).single())
    print(f"   ok: {response.ok}")
    print(f"   error: {response.error}")

    print("\n" + "=" * 60)
    print("Example completed successfully!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
