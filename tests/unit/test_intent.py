"""
Unit tests for query intents.

Tests for:
- select method/prefer/select handling
- insert, upsert, update, delete prefer token ordering
- Argument validation
- Aggregate expression builders
"""

import pytest
from pydantic import BaseModel

from postgrest_builder.exceptions import InvalidArgumentError
from postgrest_builder.intent import (
    Count,
    Returning,
    avg,
    count,
    delete,
    insert,
    max_,
    min_,
    select,
    sum_,
    update,
    upsert,
)
from postgrest_builder.request import Method, RequestState


class User(BaseModel):
    name: str


@pytest.fixture
def state() -> RequestState:
    return RequestState(url="http://localhost:3000/rest/v1/users")


class TestSelect:
    """Tests for select()."""

    def test_columns_with_returning(self, state: RequestState):
        """returning=True uses GET and joins columns."""
        result = select(state, ["id", "name"], returning=True)
        assert result.method is Method.GET
        assert result.get_query("select") == "id,name"
        assert result.get_header("prefer") == "count=exact"

    def test_star_without_returning_uses_head(self, state: RequestState):
        result = select(state, "*", returning=False)
        assert result.method is Method.HEAD
        assert result.get_query("select") == "*"

    def test_default_is_star_head(self, state: RequestState):
        result = select(state)
        assert result.get_query("select") == "*"
        assert result.method is Method.HEAD

    def test_raw_expression(self, state: RequestState):
        result = select(state, "id,author:users(name)", returning=True)
        assert result.get_query("select") == "id,author:users(name)"

    def test_empty_list(self, state: RequestState):
        assert select(state, [], returning=True).get_query("select") == ""

    def test_select_twice_keeps_one_count(self, state: RequestState):
        result = select(select(state, "id", returning=True), "id,name", returning=True)
        assert result.get_header("prefer") == "count=exact"
        assert result.get_query("select") == "id,name"

    @pytest.mark.parametrize("mode", ["planned", Count.ESTIMATED])
    def test_count_modes(self, state: RequestState, mode):
        expected = mode.value if isinstance(mode, Count) else mode
        assert select(state, count=mode).get_header("prefer") == f"count={expected}"

    def test_unknown_count_rejected(self, state: RequestState):
        with pytest.raises(InvalidArgumentError) as exc_info:
            select(state, count="approximate")
        assert exc_info.value.argument == "count"

    def test_bad_columns_rejected(self, state: RequestState):
        with pytest.raises(InvalidArgumentError):
            select(state, 42)  # type: ignore[arg-type]

    def test_select_overwrites(self, state: RequestState):
        result = select(select(state, ["id"]), ["name"])
        assert result.get_query("select") == "name"


class TestInsert:
    """Tests for insert()."""

    def test_prefer_with_on_conflict(self, state: RequestState):
        """on_conflict adds both the target and merge-duplicates, in fixed order."""
        result = insert(state, {}, on_conflict="name")
        assert (
            result.get_header("prefer")
            == "return=representation,count=exact,on_conflict=name,resolution=merge-duplicates"
        )
        assert result.get_query("on_conflict") == "name"

    def test_prefer_without_on_conflict(self, state: RequestState):
        result = insert(state, {"name": "Ada"})
        assert result.get_header("prefer") == "return=representation,count=exact"
        assert result.get_query("on_conflict") is None

    def test_method_and_body(self, state: RequestState):
        payload = {"name": "Ada"}
        result = insert(state, payload)
        assert result.method is Method.POST
        assert result.body is payload

    def test_options(self, state: RequestState):
        result = insert(state, {}, returning=Returning.MINIMAL, count="planned")
        assert result.get_header("prefer") == "return=minimal,count=planned"

    def test_list_and_model_payloads(self, state: RequestState):
        rows = [{"name": "Ada"}, User(name="Grace")]
        assert insert(state, rows).body == rows
        model = User(name="Linus")
        assert insert(state, model).body is model

    @pytest.mark.parametrize("payload", ["name=Ada", 42, [1, 2], None])
    def test_bad_payload_rejected(self, state: RequestState, payload):
        with pytest.raises(InvalidArgumentError) as exc_info:
            insert(state, payload)
        assert exc_info.value.operation == "insert"

    def test_unknown_returning_rejected(self, state: RequestState):
        with pytest.raises(InvalidArgumentError):
            insert(state, {}, returning="everything")


class TestUpsert:
    """Tests for upsert()."""

    def test_prefer_with_on_conflict(self, state: RequestState):
        result = upsert(state, {}, on_conflict="id")
        assert (
            result.get_header("prefer")
            == "resolution=merge-duplicates,return=representation,count=exact,on_conflict=id"
        )
        assert result.get_query("on_conflict") == "id"

    def test_merge_duplicates_always_present(self, state: RequestState):
        result = upsert(state, {"id": 1})
        assert result.get_header("prefer") == (
            "resolution=merge-duplicates,return=representation,count=exact"
        )
        assert result.method is Method.POST


class TestUpdate:
    """Tests for update()."""

    def test_patch_with_body(self, state: RequestState):
        result = update(state, {"name": "Ada"})
        assert result.method is Method.PATCH
        assert result.body == {"name": "Ada"}
        assert result.get_header("prefer") == "return=representation,count=exact"

    def test_options(self, state: RequestState):
        result = update(state, {}, returning="headers-only", count=Count.ESTIMATED)
        assert result.get_header("prefer") == "return=headers-only,count=estimated"


class TestDelete:
    """Tests for delete()."""

    def test_delete(self, state: RequestState):
        result = delete(state)
        assert result.method is Method.DELETE
        assert result.body is None
        assert result.get_header("prefer") == "return=representation,count=exact"

    def test_prefer_merges_with_existing_tokens(self, state: RequestState):
        """Intents add to prefer rather than replacing it."""
        result = delete(state.with_header("prefer", "tx=rollback"), returning="minimal")
        assert result.get_header("prefer") == "tx=rollback,return=minimal,count=exact"


class TestAggregates:
    """Tests for aggregate expression builders."""

    @pytest.mark.parametrize(
        ("builder", "name"),
        [(sum_, "sum"), (avg, "avg"), (min_, "min"), (max_, "max"), (count, "count")],
    )
    def test_plain(self, builder, name: str):
        assert builder("amount") == f"amount.{name}()"

    def test_aliased(self):
        assert count("id", as_="total") == "total:id.count()"
        assert avg("price", "mean_price") == "mean_price:price.avg()"

    def test_usable_in_select(self, state: RequestState):
        result = select(state, ["category", sum_("amount", as_="total")], returning=True)
        assert result.get_query("select") == "category,total:amount.sum()"

    def test_empty_column_rejected(self):
        with pytest.raises(InvalidArgumentError):
            sum_("")
