"""List the tables of the configured Athena database"""

import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import get_settings
from src.utils.athena_client import get_athena_client
from src.utils.errors import BackendQueryError

logger = logging.getLogger(__name__)


async def list_tables() -> list[str]:
    settings = get_settings()
    with get_athena_client(settings) as client:
        query = f"SHOW TABLES IN {settings.aws_athena_database}"
        logger.info("Executing query: %s", query)
        # SHOW TABLES output has no header row
        result = await client.execute_query(query, header=False)
    return [row["_col0"] for row in result.rows if row.get("_col0")]


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    settings = get_settings()
    print(f"Connecting to Athena database: {settings.aws_athena_database}")

    try:
        tables = asyncio.run(list_tables())
    except BackendQueryError as e:
        print(f"Error listing tables: {e}", file=sys.stderr)
        return 1

    print("\n=== Available Tables ===")
    for index, table in enumerate(tables, start=1):
        print(f"{index}. {table}")
    print(f"\nTotal tables found: {len(tables)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
