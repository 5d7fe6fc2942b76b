"""/api/recipes endpoints"""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_query_engine
from src.engines.ingredient_filter import (
    parse_ingredient_expression,
    parse_ingredient_lists,
)
from src.engines.pagination import Page, parse_pagination
from src.engines.query_engine import (
    AdvancedSearchCriteria,
    QueryEngine,
    parse_footprint_range,
)
from src.models.schemas import (
    IngredientFootprintItem,
    RecipeFootprintResponse,
    RecipePage,
)
from src.utils.errors import ValidationError

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


def to_recipe_page(page: Page) -> RecipePage:
    return RecipePage(
        page=page.page,
        limit=page.limit,
        total_results=page.total_results,
        total_pages=page.total_pages,
        recipes=page.rows,
    )


def _parse_bool(value: str | None, name: str) -> bool | None:
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationError(f"{name} must be true or false.")


def _parse_positive_int(value: str | None, name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except ValueError:
        raise ValidationError(f"{name} must be a positive integer.")
    if number <= 0:
        raise ValidationError(f"{name} must be a positive integer.")
    return number


@router.get("/search", response_model=RecipePage)
async def search_recipe_by_name(
    recipe_name: str | None = Query(default=None, alias="recipeName"),
    page: str = "1",
    limit: str = "10",
    engine: QueryEngine = Depends(get_query_engine),
):
    """Recipes whose name contains ``recipeName``"""
    if not recipe_name:
        raise ValidationError("Recipe name is required")
    request = parse_pagination(page, limit)
    return to_recipe_page(await engine.search_by_name(recipe_name, request))


@router.get("/by-ingredient", response_model=RecipePage)
async def search_recipe_by_ingredients(
    ingredient: str | None = None,
    include: str | None = None,
    exclude: str | None = None,
    page: str = "1",
    limit: str = "10",
    engine: QueryEngine = Depends(get_query_engine),
):
    """
    Ingredient filter search

    ``ingredient`` takes space separated tokens: ``@must !must-not |any-of``.
    Alternatively ``include`` and ``exclude`` take comma separated names.
    """
    request = parse_pagination(page, limit)
    if ingredient and ingredient.strip():
        ingredient_filter = parse_ingredient_expression(ingredient)
    elif include or exclude:
        ingredient_filter = parse_ingredient_lists(include=include, exclude=exclude)
    else:
        raise ValidationError("Ingredient parameter is required.")
    return to_recipe_page(await engine.search_by_ingredients(ingredient_filter, request))


@router.get("/advanced-search", response_model=RecipePage)
async def advanced_recipe_search(
    include: str | None = None,
    exclude: str | None = None,
    any_of: str | None = Query(default=None, alias="anyOf"),
    vegetarian: str | None = None,
    region: str | None = None,
    max_cook_time: str | None = Query(default=None, alias="maxCookTime"),
    min_carbon_footprint: str | None = Query(default=None, alias="minCarbonFootprint"),
    max_carbon_footprint: str | None = Query(default=None, alias="maxCarbonFootprint"),
    page: str = "1",
    limit: str = "10",
    engine: QueryEngine = Depends(get_query_engine),
):
    """Multi-criteria search; every given criterion must hold"""
    request = parse_pagination(page, limit)
    criteria = AdvancedSearchCriteria(
        ingredients=parse_ingredient_lists(include=include, exclude=exclude, any_of=any_of),
        vegetarian=_parse_bool(vegetarian, "vegetarian"),
        region=region,
        max_cook_time=_parse_positive_int(max_cook_time, "maxCookTime"),
        footprint=parse_footprint_range(
            min_carbon_footprint, max_carbon_footprint, required=False
        ),
    )
    return to_recipe_page(await engine.advanced_search(criteria, request))


@router.get("/recipe/{recipe_id}")
async def get_recipe_details(
    recipe_id: str,
    engine: QueryEngine = Depends(get_query_engine),
):
    """Full recipe row by integer ID"""
    return await engine.get_recipe(recipe_id)


@router.get("/ingredient-cf", response_model=RecipeFootprintResponse)
async def get_recipe_ingredients_carbon_footprint(
    id: str | None = None,
    recipe_name: str | None = Query(default=None, alias="recipeName"),
    engine: QueryEngine = Depends(get_query_engine),
):
    """Carbon footprint of each ingredient of one recipe, plus the total"""
    footprint = await engine.recipe_carbon_footprint(recipe_id=id, recipe_name=recipe_name)
    return RecipeFootprintResponse(
        recipe_name=footprint.recipe_name,
        ingredients=[
            IngredientFootprintItem(
                ingredient=item.ingredient, carbon_footprint=item.carbon_footprint
            )
            for item in footprint.summary.items
        ],
        total_carbon_footprint=footprint.summary.total,
    )


@router.get("/carbon-footprint-sum", response_model=RecipePage)
async def get_recipes_by_carbon_footprint_sum(
    min: str | None = None,
    max: str | None = None,
    page: str = "1",
    limit: str = "10",
    engine: QueryEngine = Depends(get_query_engine),
):
    """Recipes whose total footprint lies in [min, max]"""
    request = parse_pagination(page, limit)
    footprint = parse_footprint_range(min, max)
    return to_recipe_page(await engine.recipes_by_carbon_footprint(footprint, request))
