"""
Ingredient Breakdown Service - ingredients consumed by one serving.

Decomposes a recipe, sub-recipes included, into the quantity of each
canonical ingredient that one serving draws from stock. Waste inflates the
quantity drawn. The stock ledger uses this to turn sales into credits.

Results are memoized on the CostingContext, so decomposing the same recipe
for every sale of a batch costs one graph walk.
"""

from typing import Dict, Optional, Sequence

from src.models import Ingredient, Recipe
from src.services.recipe_graph import CostingContext, ensure_context


def decompose_recipe(
    recipe: Recipe,
    all_ingredients: Sequence[Ingredient],
    all_recipes: Sequence[Recipe],
    context: Optional[CostingContext] = None,
) -> Dict[str, float]:
    """
    Get the per-serving quantity of each canonical ingredient in a recipe.

    Args:
        recipe: Recipe to decompose
        all_ingredients: Every purchase record of the snapshot
        all_recipes: Every recipe of the snapshot
        context: Optional shared context; reset if built for other collections

    Returns:
        Mapping of canonical ingredient name to quantity per serving.
        Empty when yield <= 0. The mapping is a copy and safe to modify.

    Example:
        >>> decompose_recipe(lasagna, ingredients, recipes)
        {'Harina de Trigo': 0.125, 'Tomate': 0.2}
    """
    context = ensure_context(context, all_ingredients, all_recipes)
    return dict(context.portions.resolve(recipe))
