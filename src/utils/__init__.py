from .athena_client import AthenaClient, QueryResult, QueryState, get_athena_client

__all__ = ["AthenaClient", "QueryResult", "QueryState", "get_athena_client"]
