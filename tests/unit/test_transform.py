"""
Unit tests for result-shaping transforms.

Tests for:
- order accumulation and limit/range overwriting
- Media type switches (single, maybe_single, csv, geojson, custom)
- explain plan negotiation
- rollback and returning prefer tokens
- schema switching
"""

import pytest

from postgrest_builder.exceptions import InvalidArgumentError
from postgrest_builder.request import Method, RequestState
from postgrest_builder.transform import (
    MediaType,
    csv,
    explain,
    geojson,
    limit,
    maybe_single,
    order,
    range_,
    returning,
    rollback,
    schema,
    single,
    with_custom_media_type,
)

OBJECT = "application/vnd.pgrst.object+json"


@pytest.fixture
def state() -> RequestState:
    return RequestState(
        url="http://localhost:3000/rest/v1/users",
        headers={"accept": "*/*"},
    )


class TestOrder:
    """Tests for order()."""

    def test_default_direction(self, state: RequestState):
        assert order(state, "id").get_query("order") == "id.desc.nullslast"

    def test_asc_nulls_first(self, state: RequestState):
        result = order(state, "id", asc=True, null_first=True)
        assert result.get_query("order") == "id.asc.nullsfirst"

    def test_accumulates_in_call_order(self, state: RequestState):
        result = order(order(state, "c1"), "c2", asc=True)
        assert result.get_query("order") == "c1.desc.nullslast,c2.asc.nullslast"
        assert len(result.query) == 1

    def test_foreign_table(self, state: RequestState):
        result = order(state, "name", foreign_table="cities")
        assert result.get_query("cities.order") == "name.desc.nullslast"
        assert result.get_query("order") is None

    def test_empty_column_rejected(self, state: RequestState):
        with pytest.raises(InvalidArgumentError):
            order(state, "")


class TestLimit:
    """Tests for limit()."""

    def test_last_write_wins(self, state: RequestState):
        assert limit(limit(state, 10), 5).get_query("limit") == "5"

    def test_foreign_table(self, state: RequestState):
        assert limit(state, 3, foreign_table="cities").get_query("cities.limit") == "3"

    @pytest.mark.parametrize("value", ["10", 2.5, True, None])
    def test_requires_int(self, state: RequestState, value):
        with pytest.raises(InvalidArgumentError):
            limit(state, value)  # type: ignore[arg-type]


class TestRange:
    """Tests for range_()."""

    def test_inclusive_window(self, state: RequestState):
        result = range_(state, 0, 9)
        assert result.get_query("offset") == "0"
        assert result.get_query("limit") == "10"

    def test_limit_after_range(self, state: RequestState):
        """A later limit overrides the computed limit but keeps the offset."""
        result = limit(range_(state, 100, 199), 50)
        assert result.get_query("offset") == "100"
        assert result.get_query("limit") == "50"

    def test_floats(self, state: RequestState):
        result = range_(state, 0.0, 4.0)
        assert result.get_query("offset") == "0.0"
        assert result.get_query("limit") == "5.0"

    def test_foreign_table(self, state: RequestState):
        result = range_(state, 5, 9, foreign_table="cities")
        assert result.query_params == {"cities.offset": "5", "cities.limit": "5"}

    @pytest.mark.parametrize(("start", "end"), [(0, 9.0), ("0", "9"), (True, 3), (None, 1)])
    def test_type_guard(self, state: RequestState, start, end):
        with pytest.raises(InvalidArgumentError):
            range_(state, start, end)


class TestMediaTypes:
    """Tests for accept-header switches."""

    def test_single(self, state: RequestState):
        assert single(state).get_header("accept") == OBJECT

    def test_maybe_single_on_get(self, state: RequestState):
        assert maybe_single(state).get_header("accept") == "application/json"

    @pytest.mark.parametrize("method", [Method.HEAD, Method.POST, Method.PATCH, Method.DELETE])
    def test_maybe_single_on_other_methods(self, state: RequestState, method: Method):
        assert maybe_single(state.with_method(method)).get_header("accept") == OBJECT

    def test_csv(self, state: RequestState):
        assert csv(state).get_header("accept") == "text/csv"

    def test_geojson(self, state: RequestState):
        assert geojson(state).get_header("accept") == "application/geo+json"

    def test_switch_replaces_wholesale(self, state: RequestState):
        assert csv(single(state)).get_header("accept") == "text/csv"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("default", "*/*"),
            ("csv", "text/csv"),
            ("json", "application/json"),
            ("openapi", "application/openapi+json"),
            ("geojson", "application/geo+json"),
            ("postgis", "application/geo+json"),
            ("pgrst_plan", "application/vnd.pgrst.plan+json"),
            ("pgrst_object", OBJECT),
            ("pgrst_array", "application/vnd.pgrst.array+json"),
            (MediaType.CSV, "text/csv"),
            ("unknown", "*/*"),
        ],
    )
    def test_custom_media_type(self, state: RequestState, name, expected: str):
        assert with_custom_media_type(state, name).get_header("accept") == expected


class TestExplain:
    """Tests for explain()."""

    def test_defaults(self, state: RequestState):
        result = explain(state)
        assert result.get_header("accept") == "application/vnd.pgrst.plan+text;for=*/*;options:"

    def test_options_in_fixed_order(self, state: RequestState):
        result = explain(state, wal=True, analyze=True, buffers=True, format="json")
        assert (
            result.get_header("accept")
            == "application/vnd.pgrst.plan+json;for=*/*;options:analyze|buffers|wal"
        )

    def test_all_options(self, state: RequestState):
        result = explain(
            state, analyze=True, verbose=True, settings=True, buffers=True, wal=True
        )
        assert result.get_header("accept").endswith("options:analyze|verbose|settings|buffers|wal")

    def test_unknown_format_is_text(self, state: RequestState):
        assert explain(state, format="yaml").get_header("accept").startswith(
            "application/vnd.pgrst.plan+text;"
        )

    def test_for_uses_current_accept(self, state: RequestState):
        result = explain(csv(state), verbose=True)
        assert result.get_header("accept") == (
            "application/vnd.pgrst.plan+text;for=text/csv;options:verbose"
        )

    def test_missing_accept(self):
        bare = RequestState(url="u")
        assert explain(bare).get_header("accept") == "application/vnd.pgrst.plan+text;for=;options:"


class TestPreferTokens:
    """Tests for rollback() and returning()."""

    def test_rollback_alone(self, state: RequestState):
        assert rollback(state).get_header("prefer") == "tx=rollback"

    def test_rollback_merges(self, state: RequestState):
        result = rollback(state.with_header("prefer", "return=minimal"))
        assert result.get_header("prefer") == "return=minimal,tx=rollback"

    def test_returning_all(self, state: RequestState):
        result = returning(state)
        assert result.get_query("select") == "*"
        assert result.get_header("prefer") == "return=representation"

    def test_returning_empty_list(self, state: RequestState):
        assert returning(state, []).get_query("select") == "*"

    def test_returning_trims_columns(self, state: RequestState):
        result = returning(state, [" id ", "name"])
        assert result.get_query("select") == "id,name"

    def test_returning_keeps_quoted_names(self, state: RequestState):
        result = returning(state, ['"Full Name" ', " id"])
        assert result.get_query("select") == '"Full Name" ,id'

    def test_returning_merges_prefer(self, state: RequestState):
        result = returning(state.with_header("prefer", "count=exact"), ["id"])
        assert result.get_header("prefer") == "count=exact,return=representation"

    def test_returning_rejects_non_strings(self, state: RequestState):
        with pytest.raises(InvalidArgumentError):
            returning(state, [1, 2])  # type: ignore[list-item]


class TestSchema:
    """Tests for schema()."""

    def test_switch(self, state: RequestState):
        assert schema(state, "audit").schema == "audit"

    def test_empty_rejected(self, state: RequestState):
        with pytest.raises(InvalidArgumentError):
            schema(state, "")
