"""Tests for per-serving ingredient decomposition."""

import pytest

from src.services.ingredient_breakdown_service import decompose_recipe
from src.services.recipe_graph import CostingContext


@pytest.fixture
def pantry(make_ingredient):
    return [
        make_ingredient(1, "Harina 0000", canonical_name="Harina de Trigo"),
        make_ingredient(2, "Tomate perita", canonical_name="Tomate"),
        make_ingredient(3, "Harina Pureza", canonical_name="Harina de Trigo"),
        make_ingredient(4, "Sal fina"),
    ]


class TestDecomposeRecipe:
    """Quantities drawn from stock by one serving."""

    def test_quantities_divided_by_yield(self, pantry, make_recipe):
        recipe = make_recipe(1, "Pan", yield_quantity=4, ingredients=[(1, 2.0, 0)])
        assert decompose_recipe(recipe, pantry, [recipe]) == {"Harina de Trigo": pytest.approx(0.5)}

    def test_waste_inflates_quantity(self, pantry, make_recipe):
        """20% waste: 1 kg in the dish draws 1.25 kg from stock."""
        recipe = make_recipe(1, "Pan", ingredients=[(1, 1.0, 20)])
        assert decompose_recipe(recipe, pantry, [recipe])["Harina de Trigo"] == pytest.approx(1.25)

    def test_total_waste_uses_raw_quantity(self, pantry, make_recipe):
        """Waste >= 100% leaves the quantity uninflated."""
        recipe = make_recipe(1, "Pan", ingredients=[(1, 1.0, 100)])
        assert decompose_recipe(recipe, pantry, [recipe])["Harina de Trigo"] == pytest.approx(1.0)

    def test_purchases_unified_by_canonical_name(self, pantry, make_recipe):
        """Lines on two purchase records of the same ingredient are summed."""
        recipe = make_recipe(1, "Pan", ingredients=[(1, 1.0, 0), (3, 0.5, 0)])
        assert decompose_recipe(recipe, pantry, [recipe]) == {"Harina de Trigo": pytest.approx(1.5)}

    def test_invoice_name_without_canonical_name(self, pantry, make_recipe):
        recipe = make_recipe(1, "Pan", ingredients=[(4, 0.02, 0)])
        assert decompose_recipe(recipe, pantry, [recipe]) == {"Sal fina": pytest.approx(0.02)}

    def test_sub_recipe_scaled_and_merged(self, pantry, make_recipe):
        """Sauce per serving is scaled by servings used, then the batch by yield."""
        sauce = make_recipe(10, "Salsa", yield_quantity=2, ingredients=[(2, 1.0, 0)])
        lasagna = make_recipe(
            20, "Lasagna", yield_quantity=4, ingredients=[(1, 2.0, 0)], sub_recipes=[(10, 2, None)]
        )

        result = decompose_recipe(lasagna, pantry, [sauce, lasagna])

        assert result == {
            "Harina de Trigo": pytest.approx(0.5),
            "Tomate": pytest.approx(0.25),
        }

    def test_direct_cost_does_not_stop_decomposition(self, pantry, make_recipe):
        """A cost override only affects cost; the stock is still consumed."""
        sauce = make_recipe(10, "Salsa", ingredients=[(2, 1.0, 0)])
        pizza = make_recipe(20, "Pizza", sub_recipes=[(10, 1, 9.99)])
        assert decompose_recipe(pizza, pantry, [sauce, pizza]) == {"Tomate": pytest.approx(1.0)}

    @pytest.mark.parametrize("yield_quantity", [0, -1])
    def test_non_positive_yield_gives_empty_mapping(self, pantry, make_recipe, yield_quantity):
        recipe = make_recipe(1, "Pan", yield_quantity=yield_quantity, ingredients=[(1, 1.0, 0)])
        assert decompose_recipe(recipe, pantry, [recipe]) == {}

    def test_missing_references_skipped(self, pantry, make_recipe):
        recipe = make_recipe(1, "Pan", ingredients=[(99, 1.0, 0), (1, 1.0, 0)], sub_recipes=[(55, 1, None)])
        assert decompose_recipe(recipe, pantry, [recipe]) == {"Harina de Trigo": pytest.approx(1.0)}

    def test_circular_recipes_terminate(self, pantry, make_recipe):
        """A -> B -> A: B sees A's empty placeholder."""
        a = make_recipe(1, "A", ingredients=[(1, 1.0, 0)], sub_recipes=[(2, 1, None)])
        b = make_recipe(2, "B", ingredients=[(2, 1.0, 0)], sub_recipes=[(1, 1, None)])

        result = decompose_recipe(a, pantry, [a, b])

        assert result == {"Harina de Trigo": pytest.approx(1.0), "Tomate": pytest.approx(1.0)}

    def test_result_is_a_copy(self, pantry, make_recipe):
        """Mutating the result leaves the cached decomposition intact."""
        recipe = make_recipe(1, "Pan", ingredients=[(1, 1.0, 0)])
        recipes = [recipe]
        context = CostingContext(pantry, recipes)

        first = decompose_recipe(recipe, pantry, recipes, context=context)
        first["Harina de Trigo"] = 1000.0
        second = decompose_recipe(recipe, pantry, recipes, context=context)

        assert second == {"Harina de Trigo": pytest.approx(1.0)}
