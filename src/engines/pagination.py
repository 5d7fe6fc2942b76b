"""Count + ROW_NUMBER window pagination over Athena"""

import math
from dataclasses import dataclass, field

from src.utils.athena_client import AthenaClient, Row, parse_int
from src.utils.errors import NotFoundError, PageOutOfRangeError, ValidationError

ROW_NUMBER_COLUMN = "row_num"


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    page: int
    limit: int
    total_results: int
    total_pages: int
    rows: list[Row] = field(default_factory=list)


def parse_pagination(page, limit) -> PageRequest:
    """Validate page/limit (ints or numeric strings)"""
    try:
        page_num, limit_num = int(page), int(limit)
    except (TypeError, ValueError):
        page_num = limit_num = 0
    if page_num <= 0 or limit_num <= 0:
        raise ValidationError(
            "Invalid pagination parameters. Page and limit must be positive integers."
        )
    return PageRequest(page=page_num, limit=limit_num)


def where_sql(conditions: list[str]) -> str:
    return f"WHERE {' AND '.join(conditions)}" if conditions else ""


def build_count_query(table: str, conditions: list[str]) -> str:
    return f"""
    SELECT COUNT(*) AS total
    FROM {table}
    {where_sql(conditions)}
    """


def build_page_query(
    table: str,
    columns: list[str],
    conditions: list[str],
    order_by: list[str],
    request: PageRequest,
) -> str:
    """Rows (offset, offset + limit] ranked by ``order_by``"""
    select_list = ",\n           ".join(columns)
    return f"""
    SELECT *
    FROM (
        SELECT {select_list},
               ROW_NUMBER() OVER (ORDER BY {', '.join(order_by)}) AS {ROW_NUMBER_COLUMN}
        FROM {table}
        {where_sql(conditions)}
    ) AS ranked
    WHERE {ROW_NUMBER_COLUMN} > {request.offset}
      AND {ROW_NUMBER_COLUMN} <= {request.offset + request.limit}
    ORDER BY {ROW_NUMBER_COLUMN}
    """


async def paginate(
    client: AthenaClient,
    table: str,
    columns: list[str],
    conditions: list[str],
    order_by: list[str],
    request: PageRequest,
    not_found_message: str = "No results found.",
) -> Page:
    """
    Count matches, check bounds, fetch one page

    Raises:
        NotFoundError: nothing matches (regardless of the page asked for)
        PageOutOfRangeError: page past the last page
    """
    count_result = await client.execute_query(build_count_query(table, conditions))
    first = count_result.first()
    total = parse_int(first, "total") if first else 0

    if total == 0:
        raise NotFoundError(not_found_message)

    total_pages = math.ceil(total / request.limit)
    if request.page > total_pages:
        raise PageOutOfRangeError(total_pages)

    data_result = await client.execute_query(
        build_page_query(table, columns, conditions, order_by, request)
    )
    rows = [
        {k: v for k, v in row.items() if k != ROW_NUMBER_COLUMN}
        for row in data_result.rows
    ]
    return Page(
        page=request.page,
        limit=request.limit,
        total_results=total,
        total_pages=total_pages,
        rows=rows,
    )
