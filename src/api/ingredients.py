"""/api/ingredients endpoints"""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_query_engine
from src.engines.pagination import parse_pagination
from src.engines.query_engine import QueryEngine, parse_footprint_range
from src.models.schemas import IngredientFootprintResponse, IngredientPage

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])


@router.get("/carbon-footprint", response_model=IngredientPage)
async def get_ingredients_by_carbon_footprint(
    min: str | None = None,
    max: str | None = None,
    page: str = "1",
    limit: str = "10",
    engine: QueryEngine = Depends(get_query_engine),
):
    """Ingredients whose footprint lies in [min, max], lowest first"""
    footprint = parse_footprint_range(min, max)
    request = parse_pagination(page, limit)
    result = await engine.ingredients_by_carbon_footprint(footprint, request)
    return IngredientPage(
        page=result.page,
        limit=result.limit,
        total_results=result.total_results,
        total_pages=result.total_pages,
        ingredients=result.rows,
    )


@router.get("/{name}/carbon-footprint", response_model=IngredientFootprintResponse)
async def get_carbon_footprint_by_ingredient(
    name: str,
    quantity: str | None = None,
    engine: QueryEngine = Depends(get_query_engine),
):
    """Footprint per kg and for ``quantity`` kg (default 1)"""
    footprint = await engine.ingredient_carbon_footprint(name, quantity)
    return IngredientFootprintResponse(
        ingredient=footprint.ingredient,
        carbon_footprint_per_kg=footprint.carbon_footprint_per_kg,
        quantity=footprint.quantity,
        total_carbon_footprint=footprint.total_carbon_footprint,
    )
