"""Recipe query engine - Athena SQL per endpoint"""

import math
from dataclasses import dataclass

from src.engines.carbon_footprint import (
    CarbonFootprintAggregator,
    FootprintSummary,
    parse_ingredient_list,
    primary_lookup_query,
)
from src.engines.ingredient_filter import (
    IngredientFilter,
    contains,
    escape_literal,
)
from src.engines.pagination import Page, PageRequest, paginate
from src.utils.athena_client import AthenaClient, Row, parse_float
from src.utils.errors import NotFoundError, ValidationError

RECIPE_ID = '"Recipe ID"'
RECIPE_NAME = '"Recipe Name"'
RECIPE_INGREDIENTS = '"Recipe Ingredient"'
RECIPE_CF_SUM = "Carbon_footprint_sum"
RECIPE_VEGETARIAN = '"Vegetarian_Recipe"'
RECIPE_NON_VEGETARIAN = '"Non_Vegetarian_Recipe"'
RECIPE_REGION = "region"

INGREDIENT_NAME = '"RecipeDB Ingredient"'
INGREDIENT_CF = '"Carbon Footprint"'

RECIPE_COLUMNS = [
    RECIPE_ID,
    RECIPE_NAME,
    RECIPE_INGREDIENTS,
    '"Total Ingredient"',
    '"Available Ingredients"',
    '"Available Count"',
    '"Not Available Ingredients"',
    '"Not Available Count"',
    '"Available Percentage"',
    RECIPE_CF_SUM,
    RECIPE_VEGETARIAN,
    RECIPE_NON_VEGETARIAN,
    '"Miscellaneous_Recipe"',
    "continent",
    RECIPE_REGION,
    "sub_region",
    "instructions",
    "ingredient_phrase",
]

INGREDIENT_COLUMNS = [
    INGREDIENT_NAME,
    '"Category"',
    '"Sueatable_Ingredient"',
    '"Food_Commodity_Group"',
    '"Food_Commodity_Typology"',
    '"Region"',
    '"Country"',
    INGREDIENT_CF,
    '"Full Reference"',
    '"Publication Year"',
    '"Source Type"',
]


@dataclass
class FootprintRange:
    min: float | None = None
    max: float | None = None

    def conditions(self, column: str) -> list[str]:
        conditions = []
        if self.min is not None:
            conditions.append(f"{column} >= {self.min!r}")
        if self.max is not None:
            conditions.append(f"{column} <= {self.max!r}")
        return conditions


@dataclass
class AdvancedSearchCriteria:
    """Multi-criteria recipe search"""
    ingredients: IngredientFilter | None = None
    vegetarian: bool | None = None
    region: str | None = None
    max_cook_time: int | None = None
    footprint: FootprintRange | None = None


@dataclass
class RecipeFootprint:
    recipe_name: str | None
    summary: FootprintSummary


@dataclass
class IngredientCarbonFootprint:
    ingredient: str | None
    carbon_footprint_per_kg: float
    quantity: float

    @property
    def total_carbon_footprint(self) -> float:
        return self.quantity * self.carbon_footprint_per_kg


# ============== Parameter parsing ==============

def _parse_number(value: str | float | None) -> float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            "Invalid query parameters. Please provide valid numeric values for min and max."
        )
    if not math.isfinite(number):
        raise ValidationError(
            "Invalid query parameters. Please provide valid numeric values for min and max."
        )
    return number


def parse_footprint_range(min_value, max_value, required: bool = True) -> FootprintRange:
    """min/max carbon footprint bounds; at least one is required unless told otherwise"""
    footprint = FootprintRange(_parse_number(min_value), _parse_number(max_value))
    if required and footprint.min is None and footprint.max is None:
        raise ValidationError("At least one of min or max carbon footprint must be specified.")
    if footprint.min is not None and footprint.max is not None and footprint.min > footprint.max:
        raise ValidationError(
            "The min carbon footprint cannot be greater than the max carbon footprint."
        )
    return footprint


def parse_recipe_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid Recipe ID")


def parse_quantity(value) -> float:
    if value is None or value == "":
        return 1.0
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        quantity = 0.0
    if not math.isfinite(quantity) or quantity <= 0:
        raise ValidationError("Quantity must be a valid number greater than 0.")
    return quantity


class QueryEngine:
    """Recipe/ingredient query engine"""

    def __init__(
        self,
        client: AthenaClient,
        recipes_table: str,
        ingredients_table: str,
        mapped_cf_table: str,
        cf_lookup_concurrency: int = 1,
        cook_time_column: str | None = None,
    ):
        self.client = client
        self.recipes_table = recipes_table
        # None when the recipe table carries no cook time
        self.cook_time_column = cook_time_column
        self.ingredients_table = ingredients_table
        self.aggregator = CarbonFootprintAggregator(
            client,
            ingredients_table=ingredients_table,
            mapped_table=mapped_cf_table,
            concurrency=cf_lookup_concurrency,
        )

    @classmethod
    def from_settings(cls, client: AthenaClient, settings) -> "QueryEngine":
        return cls(
            client,
            recipes_table=settings.recipes_table,
            ingredients_table=settings.ingredients_table,
            mapped_cf_table=settings.mapped_cf_table,
            cf_lookup_concurrency=settings.cf_lookup_concurrency,
            cook_time_column=settings.recipe_cook_time_column or None,
        )

    async def _paginate_recipes(
        self,
        conditions: list[str],
        request: PageRequest,
        order_by: list[str] | None = None,
        not_found_message: str = "No recipes found",
    ) -> Page:
        return await paginate(
            self.client,
            table=self.recipes_table,
            columns=RECIPE_COLUMNS,
            conditions=conditions,
            order_by=order_by or [RECIPE_ID],
            request=request,
            not_found_message=not_found_message,
        )

    # ============== Recipe search ==============

    async def search_by_name(self, recipe_name: str, request: PageRequest) -> Page:
        """Recipe name substring search"""
        if not recipe_name or not recipe_name.strip():
            raise ValidationError("Recipe name is required")
        return await self._paginate_recipes(
            [contains(RECIPE_NAME, recipe_name.strip())], request
        )

    async def search_by_ingredients(
        self, ingredient_filter: IngredientFilter, request: PageRequest
    ) -> Page:
        """@/!/| ingredient filter search"""
        predicate = ingredient_filter.to_predicate(RECIPE_INGREDIENTS)
        return await self._paginate_recipes(
            [predicate], request, not_found_message="No results found."
        )

    async def advanced_search(
        self, criteria: AdvancedSearchCriteria, request: PageRequest
    ) -> Page:
        """
        Ingredient filter + vegetarian + region + cook time + footprint range

        Every given criterion must hold.
        """
        conditions = []
        if criteria.ingredients is not None and not criteria.ingredients.is_empty:
            conditions.append(criteria.ingredients.to_predicate(RECIPE_INGREDIENTS))
        if criteria.vegetarian is True:
            conditions.append(f"{RECIPE_VEGETARIAN} = 1")
        elif criteria.vegetarian is False:
            conditions.append(f"{RECIPE_NON_VEGETARIAN} = 1")
        if criteria.region:
            conditions.append(
                f"LOWER({RECIPE_REGION}) = '{escape_literal(criteria.region.strip().lower())}'"
            )
        if criteria.max_cook_time is not None:
            if criteria.max_cook_time <= 0:
                raise ValidationError("maxCookTime must be a positive integer.")
            if not self.cook_time_column:
                raise ValidationError(
                    "maxCookTime is not supported: the recipe table has no cook time column."
                )
            conditions.append(f"{self.cook_time_column} <= {int(criteria.max_cook_time)}")
        if criteria.footprint is not None:
            conditions.extend(criteria.footprint.conditions(RECIPE_CF_SUM))

        if not conditions:
            raise ValidationError("At least one search criterion is required.")
        return await self._paginate_recipes(
            conditions, request, not_found_message="No recipes match the search criteria."
        )

    async def get_recipe(self, recipe_id) -> Row:
        """Single recipe by ID"""
        recipe_id = parse_recipe_id(recipe_id)
        result = await self.client.execute_query(f"""
        SELECT *
        FROM {self.recipes_table}
        WHERE {RECIPE_ID} = {recipe_id}
        """)
        recipe = result.first()
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    async def find_recipe(self, recipe_id=None, recipe_name: str | None = None) -> Row:
        """Recipe by ID, or the first recipe whose name matches"""
        if recipe_id not in (None, ""):
            where = f"{RECIPE_ID} = {parse_recipe_id(recipe_id)}"
        elif recipe_name and recipe_name.strip():
            where = contains(RECIPE_NAME, recipe_name.strip())
        else:
            raise ValidationError("Either Recipe ID or Name is required")

        result = await self.client.execute_query(f"""
        SELECT {RECIPE_ID}, {RECIPE_NAME}, {RECIPE_INGREDIENTS}
        FROM {self.recipes_table}
        WHERE {where}
        LIMIT 1
        """)
        recipe = result.first()
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    # ============== Carbon footprint ==============

    async def recipe_carbon_footprint(
        self, recipe_id=None, recipe_name: str | None = None
    ) -> RecipeFootprint:
        """Per-ingredient footprint breakdown of one recipe"""
        recipe = await self.find_recipe(recipe_id=recipe_id, recipe_name=recipe_name)
        ingredients = parse_ingredient_list(recipe.get("Recipe Ingredient"))
        summary = await self.aggregator.aggregate(ingredients)
        return RecipeFootprint(recipe_name=recipe.get("Recipe Name"), summary=summary)

    async def recipes_by_carbon_footprint(
        self, footprint: FootprintRange, request: PageRequest
    ) -> Page:
        return await self._paginate_recipes(
            footprint.conditions(RECIPE_CF_SUM),
            request,
            order_by=[RECIPE_CF_SUM, RECIPE_ID],
            not_found_message="No recipes found for the specified carbon footprint range.",
        )

    async def ingredients_by_carbon_footprint(
        self, footprint: FootprintRange, request: PageRequest
    ) -> Page:
        return await paginate(
            self.client,
            table=self.ingredients_table,
            columns=INGREDIENT_COLUMNS,
            conditions=footprint.conditions(INGREDIENT_CF),
            order_by=[INGREDIENT_CF, INGREDIENT_NAME],
            request=request,
            not_found_message="No ingredients found within the specified carbon footprint range.",
        )

    async def ingredient_carbon_footprint(
        self, name: str, quantity=None
    ) -> IngredientCarbonFootprint:
        """Footprint per kg of one ingredient, scaled by quantity (default 1)"""
        if not name or not name.strip():
            raise ValidationError("Ingredient name is required and cannot be empty.")
        quantity = parse_quantity(quantity)

        result = await self.client.execute_query(
            primary_lookup_query(self.ingredients_table, name.strip())
        )
        row = result.first()
        if not row:
            raise NotFoundError("Ingredient not found.")
        return IngredientCarbonFootprint(
            ingredient=row.get("RecipeDB Ingredient"),
            carbon_footprint_per_kg=parse_float(row, "Carbon Footprint"),
            quantity=quantity,
        )
