"""
Recipe Graph - shared recursive walk over nested recipes.

Cost resolution and per-portion ingredient decomposition both descend the
same recipe graph: direct ingredient lines, then sub-recipe lines, then
division by yield. This module implements that walk once and lets the two
callers specialise what gets accumulated.

Memoization and cycle breaking:
- Each walker keeps a cache of recipe id -> per-serving result.
- Before descending into a recipe, an empty placeholder (0 cost, empty
  quantity mapping) is written under its id. A recipe that reaches itself
  again, directly or through other recipes, reads the placeholder and that
  edge contributes nothing. Circular recipes therefore resolve to an
  underestimate instead of recursing forever.

Cache lifetime:
- Caches live on a CostingContext built for one snapshot of ingredients and
  recipes. ensure_context() drops every cached value when it is handed
  different collections, so a context is never consulted for data it was
  not built from.
"""

import logging
from decimal import Decimal
from typing import Dict, Generic, Optional, Sequence, Set, TypeVar

from src.models import Ingredient, Recipe, RecipeIngredient, SubRecipeItem
from src.services.cost_utils import to_decimal
from src.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

T = TypeVar("T")

IngredientQuantities = Dict[str, float]


def waste_factor(line: RecipeIngredient) -> float:
    """Fraction of the purchased quantity that ends up in the dish."""
    return 1 - ((line.waste_percentage or 0) / 100)


def has_direct_cost(item: SubRecipeItem) -> bool:
    """True when a sub-recipe line carries a usable cost override."""
    value = item.direct_cost
    # NaN never equals itself
    return value is not None and value == value


class RecipeGraphWalker(Generic[T]):
    """
    Memoized, cycle-tolerant walk of one recipe and its sub-recipes.

    Subclasses provide the accumulator: how to start, how to add a direct
    ingredient line, how to add a resolved sub-recipe, and how to scale a
    full batch down to one serving.
    """

    operation = "walk_recipe"

    def __init__(self, context: "CostingContext"):
        self.context = context
        self.cache: Dict[int, T] = {}
        self._in_progress: Set[int] = set()

    def placeholder(self) -> T:
        raise NotImplementedError

    def start(self) -> T:
        raise NotImplementedError

    def add_ingredient(self, total: T, line: RecipeIngredient, ingredient: Ingredient) -> T:
        raise NotImplementedError

    def add_sub_recipe(self, total: T, per_serving: T, quantity: float) -> T:
        raise NotImplementedError

    def per_serving(self, total: T, yield_quantity: float) -> T:
        raise NotImplementedError

    def resolve(self, recipe: Recipe) -> T:
        """
        Resolve the per-serving result for a recipe.

        Args:
            recipe: Recipe to resolve

        Returns:
            Cached or freshly computed per-serving value
        """
        if recipe.id in self.cache:
            return self.cache[recipe.id]

        self.cache[recipe.id] = self.placeholder()
        self._in_progress.add(recipe.id)

        total = self.start()
        for line in recipe.recipe_ingredients:
            ingredient = self.context.find_ingredient(line.ingredient_id)
            if ingredient is None:
                log_operation(
                    logger,
                    operation=self.operation,
                    outcome="missing_ingredient",
                    level=logging.DEBUG,
                    recipe_id=recipe.id,
                    ingredient_id=line.ingredient_id,
                )
                continue
            total = self.add_ingredient(total, line, ingredient)

        for item in recipe.sub_recipes:
            total = self.visit_sub_recipe(recipe, total, item)

        result = self.per_serving(total, recipe.yield_quantity or 0)
        self.cache[recipe.id] = result
        self._in_progress.discard(recipe.id)
        return result

    def visit_sub_recipe(self, parent: Recipe, total: T, item: SubRecipeItem) -> T:
        """Resolve one sub-recipe line and fold it into the parent's total."""
        sub_recipe = self.context.find_recipe(item.sub_recipe_id)
        if sub_recipe is None:
            log_operation(
                logger,
                operation=self.operation,
                outcome="missing_sub_recipe",
                level=logging.DEBUG,
                recipe_id=parent.id,
                sub_recipe_id=item.sub_recipe_id,
            )
            return total

        if sub_recipe.id in self._in_progress:
            log_operation(
                logger,
                operation=self.operation,
                outcome="cycle_detected",
                level=logging.DEBUG,
                recipe_id=parent.id,
                sub_recipe_id=sub_recipe.id,
            )

        return self.add_sub_recipe(total, self.resolve(sub_recipe), item.quantity or 0)


class CostWalker(RecipeGraphWalker[Decimal]):
    """Accumulates monetary cost; result is cost per serving."""

    operation = "resolve_cost"

    def placeholder(self) -> Decimal:
        return Decimal("0.00")

    def start(self) -> Decimal:
        return Decimal("0.00")

    def add_ingredient(self, total: Decimal, line: RecipeIngredient, ingredient: Ingredient) -> Decimal:
        return total + line_cost(line, ingredient)

    def visit_sub_recipe(self, parent: Recipe, total: Decimal, item: SubRecipeItem) -> Decimal:
        if has_direct_cost(item):
            return total + to_decimal(item.direct_cost) * to_decimal(item.quantity)
        return super().visit_sub_recipe(parent, total, item)

    def add_sub_recipe(self, total: Decimal, per_serving: Decimal, quantity: float) -> Decimal:
        return total + per_serving * to_decimal(quantity)

    def per_serving(self, total: Decimal, yield_quantity: float) -> Decimal:
        if yield_quantity <= 0:
            return Decimal("0.00")
        return total / to_decimal(yield_quantity)


class PortionWalker(RecipeGraphWalker[IngredientQuantities]):
    """Accumulates physical quantities per canonical ingredient name."""

    operation = "decompose_recipe"

    def placeholder(self) -> IngredientQuantities:
        return {}

    def start(self) -> IngredientQuantities:
        return {}

    def add_ingredient(
        self, total: IngredientQuantities, line: RecipeIngredient, ingredient: Ingredient
    ) -> IngredientQuantities:
        name = ingredient.stock_name
        total[name] = total.get(name, 0.0) + consumed_quantity(line)
        return total

    def add_sub_recipe(
        self, total: IngredientQuantities, per_serving: IngredientQuantities, quantity: float
    ) -> IngredientQuantities:
        for name, qty_per_serving in per_serving.items():
            total[name] = total.get(name, 0.0) + qty_per_serving * quantity
        return total

    def per_serving(self, total: IngredientQuantities, yield_quantity: float) -> IngredientQuantities:
        if yield_quantity <= 0:
            return {}
        return {name: qty / yield_quantity for name, qty in total.items()}


def line_cost(line: RecipeIngredient, ingredient: Ingredient) -> Decimal:
    """
    Cost of one ingredient line for a full batch, inflated for waste.

    Lines with a non-positive quantity and lines with waste >= 100% cost 0.
    """
    quantity = to_decimal(line.quantity)
    if quantity <= 0:
        return Decimal("0.00")
    factor = 1 - to_decimal(line.waste_percentage) / 100
    if factor <= 0:
        return Decimal("0.00")
    return to_decimal(ingredient.cost_per_unit) * quantity / factor


def consumed_quantity(line: RecipeIngredient) -> float:
    """
    Quantity drawn from stock for one ingredient line, inflated for waste.

    With waste >= 100% the nominal quantity is used as is.
    """
    quantity = line.quantity or 0
    factor = waste_factor(line)
    return quantity / factor if factor > 0 else quantity


class CostingContext:
    """
    Per-snapshot lookup indexes and memo caches.

    One context serves one snapshot of ingredients and recipes. Build a new
    one per request, or pass an existing one through ensure_context(), which
    resets it when the collections change. Contexts are not shared between
    threads; each concurrent caller gets its own.
    """

    def __init__(self, ingredients: Sequence[Ingredient], recipes: Sequence[Recipe]):
        self.reset(ingredients, recipes)

    def reset(self, ingredients: Sequence[Ingredient], recipes: Sequence[Recipe]) -> None:
        """Re-index the given collections and drop every cached result."""
        self.ingredients = ingredients
        self.recipes = recipes
        self._ingredients_by_id: Dict[int, Ingredient] = {}
        for ingredient in ingredients:
            self._ingredients_by_id.setdefault(ingredient.id, ingredient)
        self._recipes_by_id: Dict[int, Recipe] = {}
        for recipe in recipes:
            self._recipes_by_id.setdefault(recipe.id, recipe)
        self.costs = CostWalker(self)
        self.portions = PortionWalker(self)

    def covers(self, ingredients: Sequence[Ingredient], recipes: Sequence[Recipe]) -> bool:
        """True if this context was built from exactly these collections."""
        return self.ingredients is ingredients and self.recipes is recipes

    def find_ingredient(self, ingredient_id: int) -> Optional[Ingredient]:
        return self._ingredients_by_id.get(ingredient_id)

    def find_recipe(self, recipe_id: int) -> Optional[Recipe]:
        return self._recipes_by_id.get(recipe_id)


def ensure_context(
    context: Optional[CostingContext],
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
) -> CostingContext:
    """
    Return a context valid for the given collections.

    Args:
        context: Existing context, or None
        ingredients: All purchase records of the snapshot
        recipes: All recipes of the snapshot

    Returns:
        A new context when none was given; the given context, reset first
        if it was built from different collections
    """
    if context is None:
        return CostingContext(ingredients, recipes)
    if not context.covers(ingredients, recipes):
        log_operation(
            logger,
            operation="ensure_context",
            outcome="invalidated",
            level=logging.DEBUG,
        )
        context.reset(ingredients, recipes)
    return context
