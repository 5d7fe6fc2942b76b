"""Shared app state and FastAPI dependencies"""

from fastapi import HTTPException

from src.engines.query_engine import QueryEngine
from src.utils.athena_client import AthenaClient


class AppState:
    athena_client: AthenaClient | None = None
    query_engine: QueryEngine | None = None


state = AppState()


def get_query_engine() -> QueryEngine:
    if not state.query_engine:
        raise HTTPException(status_code=503, detail="Service not ready")
    return state.query_engine
