"""Athena query client"""

import asyncio
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config.settings import Settings, get_settings
from src.utils.errors import (
    MalformedDataError,
    QueryFailedError,
    QueryTimeoutError,
    TransportError,
)

logger = logging.getLogger(__name__)

Row = dict[str, str | None]


class QueryState(str, Enum):
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self not in (QueryState.QUEUED, QueryState.RUNNING)


@dataclass
class QueryResult:
    """Flattened Athena result set"""
    execution_id: str
    rows: list[Row] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.rows)

    def first(self) -> Row | None:
        return self.rows[0] if self.rows else None


# ============== Row value parsing ==============

def parse_float(row: Row, column: str) -> float:
    value = row.get(column)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MalformedDataError(f"Column {column!r} is not numeric: {value!r}")


def parse_int(row: Row, column: str) -> int:
    value = row.get(column)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedDataError(f"Column {column!r} is not an integer: {value!r}")


def rows_from_result_set(pages: list[dict], header: bool = True) -> list[Row]:
    """
    Map GetQueryResults pages to records keyed by the header row

    DDL statements (SHOW TABLES, DESCRIBE ...) come back without a header;
    with header=False every row is data, keyed _col0, _col1, ... as Athena
    names unnamed columns.
    """
    raw_rows = [row for page in pages for row in page["ResultSet"]["Rows"]]
    if not raw_rows:
        return []
    if header:
        columns = [col.get("VarCharValue") for col in raw_rows[0]["Data"]]
        raw_rows = raw_rows[1:]
    else:
        width = max(len(row["Data"]) for row in raw_rows)
        columns = [f"_col{i}" for i in range(width)]
    return [
        {columns[i]: data.get("VarCharValue") for i, data in enumerate(row["Data"])}
        for row in raw_rows
    ]


# ============== Client ==============

class AthenaClient:
    """Async Athena client (start -> poll -> fetch)"""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client = None

    def connect(self) -> None:
        settings = self.settings
        credentials = {}
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            credentials = {
                "aws_access_key_id": settings.aws_access_key_id,
                "aws_secret_access_key": settings.aws_secret_access_key,
            }
        self._client = boto3.client(
            "athena", region_name=settings.aws_region, **credentials
        )

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    @property
    def client(self):
        if not self._client:
            raise RuntimeError("Athena client not connected. Call connect() first.")
        return self._client

    async def _call(self, operation: str, **kwargs) -> dict:
        """Run one blocking boto3 call in a worker thread"""
        method = getattr(self.client, operation)
        try:
            return await asyncio.to_thread(method, **kwargs)
        except (BotoCoreError, ClientError) as e:
            raise TransportError(f"Athena {operation} failed: {e}") from e

    async def start_query(self, sql: str) -> str:
        response = await self._call(
            "start_query_execution",
            QueryString=sql,
            QueryExecutionContext={"Database": self.settings.aws_athena_database},
            ResultConfiguration={
                "OutputLocation": self.settings.aws_athena_output_location
            },
            WorkGroup=self.settings.aws_athena_workgroup,
        )
        return response["QueryExecutionId"]

    async def wait_for_query(self, execution_id: str) -> QueryState:
        """Poll until terminal; raise on failure, cancellation or deadline"""
        deadline = time.monotonic() + self.settings.athena_query_timeout
        state = QueryState.QUEUED

        while not state.is_terminal:
            if time.monotonic() >= deadline:
                await self._stop_query(execution_id)
                raise QueryTimeoutError(execution_id, self.settings.athena_query_timeout)

            await asyncio.sleep(self.settings.athena_poll_interval)

            response = await self._call(
                "get_query_execution", QueryExecutionId=execution_id
            )
            status = response["QueryExecution"]["Status"]
            state = QueryState(status["State"])

            if state in (QueryState.FAILED, QueryState.CANCELLED):
                raise QueryFailedError(state.value, status.get("StateChangeReason"))

        return state

    async def fetch_results(self, execution_id: str, header: bool = True) -> list[Row]:
        pages = []
        kwargs = {"QueryExecutionId": execution_id}
        while True:
            page = await self._call("get_query_results", **kwargs)
            pages.append(page)
            next_token = page.get("NextToken")
            if not next_token:
                break
            kwargs["NextToken"] = next_token
        return rows_from_result_set(pages, header=header)

    async def execute_query(self, sql: str, header: bool = True) -> QueryResult:
        """Run SQL and return the flattened rows (header=False for DDL output)"""
        started = time.monotonic()
        execution_id = await self.start_query(sql)
        logger.debug("Athena query %s started: %s", execution_id, " ".join(sql.split()))

        await self.wait_for_query(execution_id)
        rows = await self.fetch_results(execution_id, header=header)

        logger.info(
            "Athena query %s returned %d rows in %.2fs",
            execution_id, len(rows), time.monotonic() - started,
        )
        return QueryResult(execution_id=execution_id, rows=rows)

    async def _stop_query(self, execution_id: str) -> None:
        try:
            await self._call("stop_query_execution", QueryExecutionId=execution_id)
        except TransportError as e:
            logger.warning("Could not stop Athena query %s: %s", execution_id, e)


@contextmanager
def get_athena_client(settings: Settings | None = None):
    """Athena client context manager"""
    client = AthenaClient(settings)
    try:
        client.connect()
        yield client
    finally:
        client.close()
