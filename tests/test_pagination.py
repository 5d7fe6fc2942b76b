"""Count + window pagination tests"""

import math

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.engines.pagination import (
    PageRequest,
    build_page_query,
    paginate,
    parse_pagination,
)
from src.utils.athena_client import QueryResult
from src.utils.errors import NotFoundError, PageOutOfRangeError, ValidationError


def result(*rows):
    return QueryResult(execution_id="exec", rows=list(rows))


@pytest.fixture
def mock_client():
    """Mock Athena client"""
    client = MagicMock()
    client.execute_query = AsyncMock()
    return client


async def run_page(client, page=1, limit=10):
    return await paginate(
        client,
        table="recipes",
        columns=['"Recipe ID"', '"Recipe Name"'],
        conditions=["LOWER(\"Recipe Name\") LIKE '%soup%' ESCAPE '\\'"],
        order_by=['"Recipe ID"'],
        request=PageRequest(page=page, limit=limit),
        not_found_message="No recipes found",
    )


class TestParsePagination:
    """page/limit validation"""

    def test_accepts_numeric_strings(self):
        request = parse_pagination("3", "20")

        assert request == PageRequest(page=3, limit=20)
        assert request.offset == 40

    @pytest.mark.parametrize(
        "page, limit",
        [(0, 10), (1, 0), (-1, 10), ("abc", 10), (1, "x"), (None, 10), ("1.5", 10)],
    )
    def test_rejects_invalid(self, page, limit):
        with pytest.raises(ValidationError, match="positive integers"):
            parse_pagination(page, limit)


class TestPaginate:
    """Count, bounds and window"""

    async def test_returns_page(self, mock_client):
        mock_client.execute_query.side_effect = [
            result({"total": "25"}),
            result(
                {"Recipe ID": "11", "Recipe Name": "Pea soup", "row_num": "11"},
                {"Recipe ID": "12", "Recipe Name": "Leek soup", "row_num": "12"},
            ),
        ]

        page = await run_page(mock_client, page=2, limit=10)

        assert page.page == 2
        assert page.limit == 10
        assert page.total_results == 25
        assert page.total_pages == 3
        assert page.rows[0] == {"Recipe ID": "11", "Recipe Name": "Pea soup"}

    async def test_window_bounds(self, mock_client):
        mock_client.execute_query.side_effect = [result({"total": "25"}), result()]

        await run_page(mock_client, page=2, limit=10)

        count_sql = mock_client.execute_query.call_args_list[0].args[0]
        data_sql = mock_client.execute_query.call_args_list[1].args[0]
        assert "COUNT(*) AS total" in count_sql
        assert "LIKE '%soup%'" in count_sql
        assert "ROW_NUMBER() OVER (ORDER BY \"Recipe ID\")" in data_sql
        assert "row_num > 10" in data_sql
        assert "row_num <= 20" in data_sql

    @pytest.mark.parametrize("page, limit", [(1, 1), (1, 10), (5, 3), (1000, 50)])
    async def test_zero_results_is_not_found(self, mock_client, page, limit):
        mock_client.execute_query.return_value = result({"total": "0"})

        with pytest.raises(NotFoundError, match="No recipes found"):
            await run_page(mock_client, page=page, limit=limit)

        assert mock_client.execute_query.call_count == 1

    async def test_empty_count_result_is_not_found(self, mock_client):
        mock_client.execute_query.return_value = result()

        with pytest.raises(NotFoundError):
            await run_page(mock_client)

    async def test_page_past_end(self, mock_client):
        mock_client.execute_query.return_value = result({"total": "25"})

        with pytest.raises(PageOutOfRangeError) as exc_info:
            await run_page(mock_client, page=4, limit=10)

        assert exc_info.value.total_pages == 3
        assert "Maximum page number is 3" in str(exc_info.value)
        assert mock_client.execute_query.call_count == 1

    async def test_total_pages_is_ceiling(self, mock_client):
        for count in (1, 2, 9, 10, 11, 37):
            for limit in (1, 3, 10):
                total_pages = math.ceil(count / limit)
                mock_client.execute_query.reset_mock(side_effect=True)
                mock_client.execute_query.side_effect = [result({"total": str(count)}), result()]

                page = await run_page(mock_client, page=total_pages, limit=limit)
                assert page.total_pages == total_pages

                mock_client.execute_query.side_effect = [result({"total": str(count)})]
                with pytest.raises(PageOutOfRangeError) as exc_info:
                    await run_page(mock_client, page=total_pages + 1, limit=limit)
                assert exc_info.value.total_pages == total_pages


class TestBuildPageQuery:
    """Window query text"""

    def test_without_conditions(self):
        sql = build_page_query(
            "ingredients", ["name"], [], ["cf", "name"], PageRequest(page=1, limit=5)
        )

        assert "WHERE row_num > 0" in sql
        assert "row_num <= 5" in sql
        assert "ORDER BY cf, name" in sql
        assert "FROM ingredients\n" in sql
