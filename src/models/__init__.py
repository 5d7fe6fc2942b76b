from .schemas import (
    ErrorResponse,
    RecipePage,
    IngredientPage,
    IngredientFootprintItem,
    RecipeFootprintResponse,
    IngredientFootprintResponse,
)

__all__ = [
    "ErrorResponse",
    "RecipePage",
    "IngredientPage",
    "IngredientFootprintItem",
    "RecipeFootprintResponse",
    "IngredientFootprintResponse",
]
