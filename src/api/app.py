"""FastAPI main app"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import configure_logging, get_settings
from src.api import ingredients, recipes
from src.api.dependencies import state
from src.engines.query_engine import QueryEngine
from src.utils.athena_client import AthenaClient
from src.utils.errors import RecipeApiError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifecycle"""
    settings = get_settings()
    configure_logging(settings)
    state.athena_client = AthenaClient(settings)
    state.athena_client.connect()
    state.query_engine = QueryEngine.from_settings(state.athena_client, settings)
    logger.info(
        "Connected to Athena (database=%s, workgroup=%s)",
        settings.aws_athena_database, settings.aws_athena_workgroup,
    )

    yield

    if state.athena_client:
        state.athena_client.close()
    state.athena_client = None
    state.query_engine = None
    logger.info("Disconnected from Athena")


# ============== FastAPI app ==============

app = FastAPI(
    title="Recipe Carbon API",
    description="Recipe and ingredient carbon footprint lookups over AWS Athena",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api-docs",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipes.router)
app.include_router(ingredients.router)


# ============== Error responses ==============

@app.exception_handler(RecipeApiError)
async def recipe_api_error_handler(request: Request, exc: RecipeApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"message": f"Invalid request: {errors}"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


# ============== Endpoints ==============

@app.get("/")
async def root():
    """Liveness check"""
    return {"status": "ok", "message": "Recipe Carbon API"}
