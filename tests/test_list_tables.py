"""Table listing script tests"""

import pytest
from unittest.mock import MagicMock, patch

from config.settings import Settings
from scripts import list_tables


def athena_rows(*names):
    return {"ResultSet": {"Rows": [{"Data": [{"VarCharValue": name}]} for name in names]}}


@pytest.fixture
def boto_client():
    client = MagicMock()
    client.start_query_execution.return_value = {"QueryExecutionId": "exec-1"}
    client.get_query_execution.return_value = {
        "QueryExecution": {"Status": {"State": "SUCCEEDED"}}
    }
    client.get_query_results.return_value = athena_rows(
        "cutoff10_recipes_veg_non_veg_sm",
        "ingredient_details_server",
        "recipedb_mapped_ing_cf_count",
    )
    return client


@pytest.fixture
def settings():
    return Settings(aws_athena_database="recipedb", athena_poll_interval=0)


@pytest.fixture
def patched(settings, boto_client):
    with patch("scripts.list_tables.get_settings", return_value=settings), \
            patch("src.utils.athena_client.boto3.client", return_value=boto_client):
        yield boto_client


async def test_lists_every_table(patched):
    tables = await list_tables.list_tables()

    assert tables == [
        "cutoff10_recipes_veg_non_veg_sm",
        "ingredient_details_server",
        "recipedb_mapped_ing_cf_count",
    ]
    assert patched.start_query_execution.call_args.kwargs["QueryString"] == (
        "SHOW TABLES IN recipedb"
    )
    patched.close.assert_called_once()


def test_main_prints_total(patched, capsys):
    assert list_tables.main() == 0

    out = capsys.readouterr().out
    assert "1. cutoff10_recipes_veg_non_veg_sm" in out
    assert "Total tables found: 3" in out
