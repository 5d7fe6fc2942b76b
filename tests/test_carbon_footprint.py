"""Carbon footprint aggregation tests"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.engines.carbon_footprint import (
    DATA_NOT_AVAILABLE,
    CarbonFootprintAggregator,
    mapped_lookup_query,
    parse_ingredient_list,
)
from src.utils.athena_client import QueryResult
from src.utils.errors import MalformedDataError, QueryFailedError, ValidationError

PRIMARY = {"tomato": "1.5", "garlic": "0.5", "salt": "0.1"}
MAPPED = {"olive|oil": "3.2"}


def result(*rows):
    return QueryResult(execution_id="exec", rows=list(rows))


def fake_athena(sql: str) -> QueryResult:
    """Answer lookups from the PRIMARY/MAPPED tables"""
    if "ingredient_details_server" in sql:
        for name, cf in PRIMARY.items():
            if f"'%{name}%'" in sql:
                return result({"RecipeDB Ingredient": name, "Carbon Footprint": cf})
        return result()
    for name, cf in MAPPED.items():
        if f"'%{name}%'" in sql:
            return result({"Sueatable Ingredient": name, "CF": cf})
    return result()


@pytest.fixture
def mock_client():
    """Mock Athena client"""
    client = MagicMock()
    client.execute_query = AsyncMock(side_effect=fake_athena)
    return client


@pytest.fixture
def aggregator(mock_client):
    return CarbonFootprintAggregator(
        mock_client,
        ingredients_table="ingredient_details_server",
        mapped_table="recipedb_mapped_ing_cf_count",
    )


class TestParseIngredientList:
    """Stored list parsing"""

    def test_double_quoted(self):
        assert parse_ingredient_list('["tomato","garlic"]') == ["tomato", "garlic"]

    def test_single_quoted(self):
        assert parse_ingredient_list("['tomato', 'garlic']") == ["tomato", "garlic"]

    def test_empty_list(self):
        with pytest.raises(ValidationError, match="No ingredients"):
            parse_ingredient_list("[]")

    @pytest.mark.parametrize("raw", ["{malformed json}", "", None, '{"a": 1}', "[1, 2]"])
    def test_malformed(self, raw):
        with pytest.raises(MalformedDataError, match="Invalid Recipe Ingredient format"):
            parse_ingredient_list(raw)


class TestAggregate:
    """Lookups, fallback and totals"""

    async def test_sums_found_footprints(self, aggregator):
        summary = await aggregator.aggregate(parse_ingredient_list('["tomato","garlic"]'))

        assert summary.total == 2.0
        assert [(i.ingredient, i.carbon_footprint) for i in summary.items] == [
            ("tomato", 1.5),
            ("garlic", 0.5),
        ]

    async def test_fallback_table(self, aggregator, mock_client):
        summary = await aggregator.aggregate(["olive oil"])

        assert summary.items[0].ingredient == "olive|oil"
        assert summary.items[0].carbon_footprint == 3.2
        assert mock_client.execute_query.call_count == 2

    async def test_unavailable_is_kept_but_not_summed(self, aggregator):
        summary = await aggregator.aggregate(["tomato", "unobtainium"])

        assert summary.total == 1.5
        assert summary.items[1].ingredient == "unobtainium"
        assert summary.items[1].carbon_footprint == DATA_NOT_AVAILABLE
        assert not summary.items[1].available

    async def test_backend_error_degrades_one_item(self, aggregator, mock_client):
        def flaky(sql):
            if "'%garlic%'" in sql:
                raise QueryFailedError("FAILED", "boom")
            return fake_athena(sql)

        mock_client.execute_query.side_effect = flaky

        summary = await aggregator.aggregate(["tomato", "garlic", "salt"])

        assert [i.carbon_footprint for i in summary.items] == [1.5, DATA_NOT_AVAILABLE, 0.1]
        assert summary.total == pytest.approx(1.6)

    async def test_unparseable_footprint_degrades(self, aggregator, mock_client):
        mock_client.execute_query.side_effect = None
        mock_client.execute_query.return_value = result(
            {"RecipeDB Ingredient": "tomato", "Carbon Footprint": "n/a"}
        )

        summary = await aggregator.aggregate(["tomato"])

        assert summary.items[0].carbon_footprint == DATA_NOT_AVAILABLE
        assert summary.total == 0

    async def test_bounded_concurrency_keeps_order(self, mock_client):
        aggregator = CarbonFootprintAggregator(
            mock_client,
            ingredients_table="ingredient_details_server",
            mapped_table="recipedb_mapped_ing_cf_count",
            concurrency=3,
        )

        summary = await aggregator.aggregate(["salt", "tomato", "nothing", "garlic"])

        assert [i.ingredient for i in summary.items] == ["salt", "tomato", "nothing", "garlic"]
        assert summary.total == pytest.approx(2.1)


class TestLookupQueries:
    def test_mapped_key_is_pipe_joined(self):
        sql = mapped_lookup_query("mapped", "Olive  Oil")

        assert "'%olive|oil%'" in sql
