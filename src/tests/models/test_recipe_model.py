"""Tests for Recipe, RecipeIngredient and SubRecipeItem models."""

from decimal import Decimal

from src.models import Ingredient, Recipe, RecipeIngredient, SubRecipeItem
from src.services.database import session_scope


class TestRecipeRelationships:
    def test_nested_recipe_round_trip(self, test_db):
        with session_scope() as session:
            tomato = Ingredient(name="Tomate", unit="kg", cost_per_unit=3.0)
            session.add(tomato)
            session.flush()

            sauce = Recipe(name="Salsa", yield_quantity=2)
            sauce.recipe_ingredients.append(
                RecipeIngredient(ingredient_id=tomato.id, quantity=1.0, unit="kg", waste_percentage=10)
            )
            session.add(sauce)
            session.flush()

            lasagna = Recipe(name="Lasagna", yield_quantity=4)
            lasagna.sub_recipes.append(SubRecipeItem(sub_recipe_id=sauce.id, quantity=2, direct_cost=1.5))
            session.add(lasagna)

        session = test_db()
        lasagna = session.query(Recipe).filter_by(name="Lasagna").one()
        item = lasagna.sub_recipes[0]

        assert item.sub_recipe.name == "Salsa"
        assert item.direct_cost == Decimal("1.5")
        assert item.sub_recipe.recipe_ingredients[0].waste_percentage == 10
        assert lasagna.category == "Sin Analizar"

    def test_self_reference_can_be_stored(self, test_db):
        """Cycles are a data problem handled at costing time, not a schema error."""
        with session_scope() as session:
            loop = Recipe(name="Masa Madre")
            session.add(loop)
            session.flush()
            loop.sub_recipes.append(SubRecipeItem(sub_recipe_id=loop.id, quantity=1))

        stored = test_db().query(Recipe).one()
        assert stored.sub_recipes[0].sub_recipe_id == stored.id

    def test_direct_cost_optional(self):
        assert SubRecipeItem(sub_recipe_id=1, quantity=1).direct_cost is None
