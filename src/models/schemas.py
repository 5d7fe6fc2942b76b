"""API response schemas"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


Row = dict[str, str | None]


# ============== Errors ==============

class ErrorResponse(BaseModel):
    message: str


# ============== Pagination ==============

class PageEnvelope(ApiModel):
    page: int
    limit: int
    total_results: int
    total_pages: int


class RecipePage(PageEnvelope):
    recipes: list[Row]


class IngredientPage(PageEnvelope):
    ingredients: list[Row]


# ============== Carbon footprint ==============

class IngredientFootprintItem(ApiModel):
    ingredient: str
    carbon_footprint: float | str


class RecipeFootprintResponse(ApiModel):
    recipe_name: str | None
    ingredients: list[IngredientFootprintItem]
    total_carbon_footprint: float


class IngredientFootprintResponse(ApiModel):
    ingredient: str | None
    carbon_footprint_per_kg: float
    quantity: float
    total_carbon_footprint: float
