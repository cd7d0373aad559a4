"""
Unit tests for the QueryBuilder facade and request seeding.

Tests for:
- from_/seed_request initial state
- Fluent chaining and immutability
- Protocol conformance
- Delegation to intents, filters and transforms
"""

import logging

import pytest

from postgrest_builder import (
    ClientContext,
    FilterOps,
    QueryBuilder,
    QueryIntentOps,
    TransformOps,
    __version__,
    from_,
    seed_request,
)
from postgrest_builder.builder import CLIENT_INFO
from postgrest_builder.exceptions import ContractViolationError, InvalidArgumentError
from postgrest_builder.request import Method, RequestState


class TestSeedRequest:
    """Tests for the initial request."""

    def test_url(self, base_request: RequestState):
        assert base_request.url == "http://localhost:3000/rest/v1/users"

    def test_method_and_schema(self, base_request: RequestState):
        assert base_request.method is Method.GET
        assert base_request.schema == "public"

    def test_default_headers(self, base_request: RequestState):
        assert dict(base_request.headers) == {
            "x-client-info": f"postgrest-builder/{__version__}",
            "content-type": "application/json",
            "accept": "*/*",
            "apikey": "anon-key",
            "authorization": "Bearer anon-key",
        }
        assert CLIENT_INFO == f"postgrest-builder/{__version__}"

    def test_no_query(self, base_request: RequestState):
        assert base_request.query == ()

    def test_custom_context(self):
        ctx = ClientContext(
            base_url="https://example.com/",
            api_key="k",
            schema_name="audit",
            rest_path="/api",
            auth_headers={"Authorization": "Bearer user-token"},
        )
        state = seed_request(ctx, "events")
        assert state.url == "https://example.com/api/events"
        assert state.schema == "audit"
        assert state.get_header("authorization") == "Bearer user-token"

    @pytest.mark.parametrize("relation", ["", None, 3])
    def test_invalid_relation(self, client_context: ClientContext, relation):
        with pytest.raises(InvalidArgumentError):
            seed_request(client_context, relation)  # type: ignore[arg-type]

    def test_from_logs(self, client_context: ClientContext, caplog):
        with caplog.at_level(logging.DEBUG, logger="postgrest_builder.builder"):
            from_(client_context, "users")
        assert "Building request for relation 'users'" in caplog.text


class TestFacade:
    """Tests for QueryBuilder behavior."""

    def test_wraps_seeded_request(self, query: QueryBuilder, base_request: RequestState):
        assert query.request == base_request

    def test_implements_protocols(self, query: QueryBuilder):
        assert isinstance(query, QueryIntentOps)
        assert isinstance(query, FilterOps)
        assert isinstance(query, TransformOps)

    def test_methods_return_new_builders(self, query: QueryBuilder):
        filtered = query.eq("id", 1)
        assert isinstance(filtered, QueryBuilder)
        assert filtered is not query
        assert query.request.get_query("id") is None

    def test_branching(self, query: QueryBuilder):
        base = query.select("*", returning=True)
        a = base.eq("status", "open")
        b = base.order("created_at").limit(5)
        assert a.request.get_query("order") is None
        assert b.request.get_query("status") is None
        assert base.request.query == (("select", "*"),)

    def test_equality(self, query: QueryBuilder):
        assert query.eq("a", 1) == query.eq("a", 1)
        assert query.eq("a", 1) != query.eq("a", 2)

    def test_repr(self, query: QueryBuilder):
        assert repr(query.limit(1)) == (
            "QueryBuilder(GET http://localhost:3000/rest/v1/users?limit=1)"
        )

    def test_errors_propagate(self, query: QueryBuilder):
        with pytest.raises(ContractViolationError):
            query.filter("id", "bogus", 1)


class TestChaining:
    """End-to-end chains through the facade."""

    def test_select_chain(self, query: QueryBuilder):
        request = (
            query.select(["id", "name"], returning=True)
            .eq("status", "active")
            .order("created_at")
            .order("id", asc=True)
            .range(0, 9)
            .request
        )
        assert request.method is Method.GET
        assert request.query == (
            ("select", "id,name"),
            ("status", "eq.active"),
            ("order", "created_at.desc.nullslast,id.asc.nullslast"),
            ("offset", "0"),
            ("limit", "10"),
        )
        assert request.get_header("prefer") == "count=exact"

    def test_upsert_chain(self, query: QueryBuilder):
        request = query.upsert({"id": 1, "name": "Ada"}, on_conflict="id").returning(["id"]).request
        assert request.method is Method.POST
        assert request.get_query("on_conflict") == "id"
        assert request.get_query("select") == "id"
        assert request.get_header("prefer") == (
            "resolution=merge-duplicates,return=representation,count=exact,on_conflict=id"
        )

    def test_update_with_filters(self, query: QueryBuilder):
        request = (
            query.update({"status": "archived"})
            .lt("updated_at", "2024-01-01")
            .not_("status", "eq", "archived")
            .maybe_single()
            .request
        )
        assert request.method is Method.PATCH
        assert request.query_params == {
            "updated_at": "lt.2024-01-01",
            "status": "not.eq.archived",
        }
        assert request.get_header("accept") == "application/vnd.pgrst.object+json"

    def test_delete_with_rollback(self, query: QueryBuilder):
        request = query.delete(returning="minimal").in_("id", [1, 2]).rollback().request
        assert request.method is Method.DELETE
        assert request.get_header("prefer") == "return=minimal,count=exact,tx=rollback"

    def test_filter_surface(self, query: QueryBuilder):
        request = (
            query.neq("a", 1)
            .gt("b", 2)
            .gte("c", 3)
            .lte("d", 4)
            .like("e", "x%")
            .ilike("f", "y%")
            .like_all_of("g", ["a%"])
            .like_any_of("h", ["b%"])
            .ilike_all_of("i", ["c%"])
            .ilike_any_of("j", ["d%"])
            .regex_match("k", "^a")
            .regex_imatch("l", "^b")
            .is_("m", None)
            .is_distinct("n", 5)
            .within("o", [1])
            .contains("p", ["q"])
            .contained_by("r", {"s": 1})
            .overlaps("t", "{u}")
            .range_lt("v", "[1,2]")
            .range_gt("w", "[1,2]")
            .range_gte("x", "[1,2]")
            .range_lte("y", "[1,2]")
            .range_adjacent("z", "[1,2]")
            .text_search("body", "cat", type="websearch", config="english")
            .match({"aa": "bb"})
            .where(("eq", "cc", 1))
            .filter("dd", "eq", 2)
            .all_of("ee.eq.1")
            .any_of([("eq", "ff", 1)], foreign_table="rel")
            .request
        )
        params = request.query_params
        assert params["a"] == "neq.1"
        assert params["g"] == "like(all).{a%}"
        assert params["m"] == "is.null"
        assert params["o"] == "in.(1)"
        assert params["r"] == 'cd.{"s":1}'
        assert params["z"] == "adj.[1,2]"
        assert params["body"] == "wfts(english).cat"
        assert params["aa"] == "eq.bb"
        assert params["and"] == "(ee.eq.1)"
        assert params["rel.or"] == "(ff.eq.1)"
        assert len(params) == 29

    def test_transform_surface(self, query: QueryBuilder):
        request = (
            query.schema("audit")
            .csv()
            .geojson()
            .single()
            .with_custom_media_type("json")
            .explain(analyze=True)
            .limit(1, foreign_table="rel")
            .request
        )
        assert request.schema == "audit"
        assert request.get_header("accept") == (
            "application/vnd.pgrst.plan+text;for=application/json;options:analyze"
        )
        assert request.get_query("rel.limit") == "1"

    def test_insert_and_head(self, query: QueryBuilder):
        assert query.insert({"a": 1}).request.method is Method.POST
        assert query.select().request.method is Method.HEAD
