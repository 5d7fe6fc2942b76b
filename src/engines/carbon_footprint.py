"""Recipe carbon footprint aggregation"""

import asyncio
import json
import logging
from dataclasses import dataclass, field

from src.engines.ingredient_filter import escape_like_literal
from src.utils.athena_client import AthenaClient, parse_float
from src.utils.errors import BackendQueryError, MalformedDataError, ValidationError

logger = logging.getLogger(__name__)

DATA_NOT_AVAILABLE = "Data not available"

PRIMARY_NAME_COLUMN = '"RecipeDB Ingredient"'
PRIMARY_CF_COLUMN = '"Carbon Footprint"'
MAPPED_NAME_COLUMN = '"Sueatable Ingredient"'
MAPPED_CF_COLUMN = '"CF"'


@dataclass
class IngredientFootprint:
    ingredient: str
    carbon_footprint: float | str

    @property
    def available(self) -> bool:
        return not isinstance(self.carbon_footprint, str)


@dataclass
class FootprintSummary:
    items: list[IngredientFootprint] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(item.carbon_footprint for item in self.items if item.available)


def parse_ingredient_list(raw: str | None) -> list[str]:
    """Parse the stored single-quoted list, e.g. ``['salt', 'garlic']``"""
    try:
        ingredients = json.loads((raw or "").replace("'", '"'))
    except json.JSONDecodeError:
        logger.error("Invalid Recipe Ingredient JSON: %r", raw)
        raise MalformedDataError("Invalid Recipe Ingredient format")

    if not isinstance(ingredients, list) or not all(isinstance(i, str) for i in ingredients):
        logger.error("Recipe Ingredient is not a list of names: %r", raw)
        raise MalformedDataError("Invalid Recipe Ingredient format")
    if not ingredients:
        raise ValidationError("No ingredients found in the recipe")
    return ingredients


def primary_lookup_query(table: str, ingredient: str) -> str:
    return f"""
    SELECT {PRIMARY_NAME_COLUMN}, {PRIMARY_CF_COLUMN}
    FROM {table}
    WHERE LOWER({PRIMARY_NAME_COLUMN}) LIKE '%{escape_like_literal(ingredient)}%' ESCAPE '\\'
    LIMIT 1
    """


def mapped_lookup_query(table: str, ingredient: str) -> str:
    # mapped names are stored pipe-joined
    key = "|".join(ingredient.split())
    return f"""
    SELECT {MAPPED_NAME_COLUMN}, {MAPPED_CF_COLUMN}
    FROM {table}
    WHERE LOWER({MAPPED_NAME_COLUMN}) LIKE '%{escape_like_literal(key)}%' ESCAPE '\\'
    LIMIT 1
    """


class CarbonFootprintAggregator:
    """Per-ingredient lookups with a fallback table"""

    def __init__(
        self,
        client: AthenaClient,
        ingredients_table: str,
        mapped_table: str,
        concurrency: int = 1,
    ):
        self.client = client
        self.ingredients_table = ingredients_table
        self.mapped_table = mapped_table
        self.concurrency = max(1, concurrency)

    async def lookup(self, ingredient: str) -> IngredientFootprint:
        """Look up one ingredient; never raises for backend or data errors"""
        try:
            result = await self.client.execute_query(
                primary_lookup_query(self.ingredients_table, ingredient)
            )
            row = result.first()
            if row:
                return IngredientFootprint(
                    ingredient=row.get("RecipeDB Ingredient") or ingredient,
                    carbon_footprint=parse_float(row, "Carbon Footprint"),
                )

            result = await self.client.execute_query(
                mapped_lookup_query(self.mapped_table, ingredient)
            )
            row = result.first()
            if row:
                return IngredientFootprint(
                    ingredient=row.get("Sueatable Ingredient") or ingredient,
                    carbon_footprint=parse_float(row, "CF"),
                )
        except (BackendQueryError, MalformedDataError) as e:
            logger.warning("Error fetching carbon footprint for %r: %s", ingredient, e)

        return IngredientFootprint(ingredient=ingredient, carbon_footprint=DATA_NOT_AVAILABLE)

    async def aggregate(self, ingredients: list[str]) -> FootprintSummary:
        if self.concurrency == 1:
            return FootprintSummary(items=[await self.lookup(i) for i in ingredients])

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(ingredient: str) -> IngredientFootprint:
            async with semaphore:
                return await self.lookup(ingredient)

        items = await asyncio.gather(*(bounded(i) for i in ingredients))
        return FootprintSummary(items=list(items))
