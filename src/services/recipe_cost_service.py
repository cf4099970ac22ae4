"""
Recipe Cost Service - cost per serving of nested recipes.

This service provides:
- resolve_cost(): cost per serving of one recipe, descending into
  sub-recipes, honouring direct-cost overrides and waste percentages
- get_recipe_cost_breakdown(): per-line costs plus margin analysis
- find_recipe_by_name(): exact name lookup used to match sales
- get_recipe_by_name(): the same lookup, raising RecipeNotFound

All functions are pure: they read a snapshot of records and never touch
the database. Missing references and circular recipes degrade to zero
contributions instead of raising.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from src.models import Ingredient, Recipe
from src.services.cost_utils import Number, to_decimal
from src.services.exceptions import RecipeNotFound
from src.services.recipe_graph import (
    CostingContext,
    ensure_context,
    has_direct_cost,
    line_cost,
)
from src.utils.config import get_config


@dataclass
class IngredientLineCost:
    """Cost of one ingredient line for a full batch."""

    ingredient_id: int
    ingredient_name: Optional[str]  # None when the purchase record is missing
    quantity: float
    unit: str
    waste_percentage: float
    cost: Decimal


@dataclass
class SubRecipeLineCost:
    """Cost of one sub-recipe line for a full batch."""

    sub_recipe_id: int
    sub_recipe_name: Optional[str]  # None when the recipe is missing
    quantity: float
    cost_per_serving: Decimal
    uses_direct_cost: bool
    cost: Decimal


@dataclass
class RecipeCostBreakdown:
    """Cost analysis of one recipe."""

    recipe_id: int
    recipe_name: str
    yield_quantity: float
    sale_price: Decimal
    batch_cost: Decimal
    cost_per_serving: Decimal
    cost_with_vat: Decimal
    profit_per_serving: Decimal
    margin_percent: Decimal
    ingredient_lines: List[IngredientLineCost] = field(default_factory=list)
    sub_recipe_lines: List[SubRecipeLineCost] = field(default_factory=list)


def resolve_cost(
    recipe: Recipe,
    all_ingredients: Sequence[Ingredient],
    all_recipes: Sequence[Recipe],
    context: Optional[CostingContext] = None,
) -> Decimal:
    """
    Calculate the cost of one serving of a recipe.

    Args:
        recipe: Recipe to cost
        all_ingredients: Every purchase record of the snapshot
        all_recipes: Every recipe of the snapshot (for sub-recipe lookups)
        context: Optional context to share memoized costs across calls on
            the same snapshot. It is reset if built for other collections.

    Returns:
        Non-negative Decimal cost per serving; 0 when yield <= 0

    Example:
        >>> cost = resolve_cost(lasagna, ingredients, recipes)
        >>> print(f"{cost:.2f} per serving")
    """
    context = ensure_context(context, all_ingredients, all_recipes)
    return context.costs.resolve(recipe)


def find_recipe_by_name(name: str, recipes: Sequence[Recipe]) -> Optional[Recipe]:
    """
    Find the recipe whose display name equals ``name`` exactly.

    Matching is case-sensitive, the same rule sales are matched with.

    Returns:
        First matching Recipe, or None
    """
    for recipe in recipes:
        if recipe.name == name:
            return recipe
    return None


def get_recipe_by_name(name: str, recipes: Sequence[Recipe]) -> Recipe:
    """
    Find a recipe by exact name.

    Raises:
        RecipeNotFound: If no recipe has that name
    """
    recipe = find_recipe_by_name(name, recipes)
    if recipe is None:
        raise RecipeNotFound(name)
    return recipe


def calculate_margin(cost_per_serving: Number, sale_price: Number, vat_rate: Number) -> dict:
    """
    Margin analysis of a serving.

    Args:
        cost_per_serving: Ingredient cost of one serving
        sale_price: Menu price of one serving
        vat_rate: VAT applied on top of the cost

    Returns:
        Dict of Decimals: cost_with_vat, profit_per_serving and
        margin_percent (margin is 0 when the sale price is not positive)
    """
    sale_price = to_decimal(sale_price)
    cost_with_vat = to_decimal(cost_per_serving) * (1 + to_decimal(vat_rate))
    profit = sale_price - cost_with_vat
    margin = (profit / sale_price) * 100 if sale_price > 0 else Decimal("0.00")
    return {
        "cost_with_vat": cost_with_vat,
        "profit_per_serving": profit,
        "margin_percent": margin,
    }


def get_recipe_cost_breakdown(
    recipe: Recipe,
    all_ingredients: Sequence[Ingredient],
    all_recipes: Sequence[Recipe],
    context: Optional[CostingContext] = None,
    vat_rate: Optional[float] = None,
) -> RecipeCostBreakdown:
    """
    Get a recipe's cost broken down per line, with margin analysis.

    Args:
        recipe: Recipe to analyse
        all_ingredients: Every purchase record of the snapshot
        all_recipes: Every recipe of the snapshot
        context: Optional shared context (see resolve_cost)
        vat_rate: VAT rate; defaults to the configured rate

    Returns:
        RecipeCostBreakdown. Line costs are per full batch; the per-serving
        figures match resolve_cost().
    """
    context = ensure_context(context, all_ingredients, all_recipes)
    if vat_rate is None:
        vat_rate = get_config().vat_rate

    # Sub-recipe lines below read what this walk cached
    cost_per_serving = context.costs.resolve(recipe)

    ingredient_lines = []
    for line in recipe.recipe_ingredients:
        ingredient = context.find_ingredient(line.ingredient_id)
        ingredient_lines.append(
            IngredientLineCost(
                ingredient_id=line.ingredient_id,
                ingredient_name=ingredient.name if ingredient else None,
                quantity=line.quantity or 0,
                unit=line.unit,
                waste_percentage=line.waste_percentage or 0,
                cost=line_cost(line, ingredient) if ingredient else Decimal("0.00"),
            )
        )

    sub_recipe_lines = []
    for item in recipe.sub_recipes:
        sub_recipe = context.find_recipe(item.sub_recipe_id)
        uses_direct_cost = has_direct_cost(item)
        if uses_direct_cost:
            per_serving = to_decimal(item.direct_cost)
        elif sub_recipe is not None:
            per_serving = context.costs.resolve(sub_recipe)
        else:
            per_serving = Decimal("0.00")
        quantity = item.quantity or 0
        sub_recipe_lines.append(
            SubRecipeLineCost(
                sub_recipe_id=item.sub_recipe_id,
                sub_recipe_name=sub_recipe.name if sub_recipe else None,
                quantity=quantity,
                cost_per_serving=per_serving,
                uses_direct_cost=uses_direct_cost,
                cost=per_serving * to_decimal(quantity),
            )
        )

    sale_price = to_decimal(recipe.sale_price)
    margin = calculate_margin(cost_per_serving, sale_price, vat_rate)

    return RecipeCostBreakdown(
        recipe_id=recipe.id,
        recipe_name=recipe.name,
        yield_quantity=recipe.yield_quantity or 0,
        sale_price=sale_price,
        batch_cost=sum((line.cost for line in ingredient_lines), Decimal("0.00"))
        + sum((line.cost for line in sub_recipe_lines), Decimal("0.00")),
        cost_per_serving=cost_per_serving,
        ingredient_lines=ingredient_lines,
        sub_recipe_lines=sub_recipe_lines,
        **margin,
    )
