"""Tests for dashboard figures.

Scenario (VAT 0):
- Pizza: cost 2.0, list price 12 (overrides recipe price 10), 5 sold
- Pasta: cost 3.0, price 8, 12 sold
- Agua: cost 0, price 2, 3 sold (100% margin)
- Cover charges and one unmatched product
"""

import logging
from decimal import Decimal

import pytest

from src.models import MenuQuadrant, ProductPrice, SaleKind
from src.services.dashboard_service import (
    SaleProfitability,
    calculate_dashboard_data,
    classify_menu_items,
    find_low_stock_items,
)
from src.services.stock_ledger_service import StockLedger


@pytest.fixture
def snapshot(make_ingredient, make_recipe, make_sale):
    ingredients = [
        make_ingredient(1, "Harina", cost_per_unit=2.0, purchase_quantity=10.0),
        make_ingredient(2, "Tomate", cost_per_unit=3.0, purchase_quantity=5.0),
    ]
    recipes = [
        make_recipe(1, "Pizza", ingredients=[(1, 1.0, 0)], sale_price=10.0, category="Pizzas"),
        make_recipe(2, "Pasta", ingredients=[(2, 1.0, 0)], sale_price=8.0, category="Pastas"),
        make_recipe(3, "Agua", sale_price=2.0, category="Bebidas"),
    ]
    sales = [
        make_sale("Pizza", 5),
        make_sale("Pasta", 12),
        make_sale("Agua", 3),
        make_sale("Cubierto Almuerzo", 20),
        make_sale("Cubierto Cena", 15),
        make_sale("Helado", 2),
    ]
    internal = [
        make_sale("Agua", 1, kind=SaleKind.INTERNAL),
        make_sale("Pasta", 4, kind=SaleKind.INTERNAL),
    ]
    prices = [ProductPrice(name="Pizza", sale_price=12.0)]
    return dict(ingredients=ingredients, recipes=recipes, sales=sales, internal=internal, prices=prices)


def _dashboard(snapshot, menu_item_names=None, low_stock_settings=None):
    return calculate_dashboard_data(
        snapshot["recipes"],
        snapshot["ingredients"],
        snapshot["sales"],
        snapshot["prices"],
        snapshot["internal"],
        menu_item_names,
        low_stock_settings or {},
        [],
        vat_rate=0,
    )


class TestProfitabilityRankings:
    """Top lists built from matched sales."""

    def test_top_selling_by_quantity(self, snapshot):
        data = _dashboard(snapshot)
        assert [item.name for item in data.top_selling] == ["Pasta", "Pizza", "Agua"]

    def test_price_list_overrides_recipe_price(self, snapshot):
        data = _dashboard(snapshot)
        pizza = next(item for item in data.top_selling if item.name == "Pizza")
        assert pizza.profit_per_unit == Decimal("10")
        assert pizza.total_profit == Decimal("50")
        assert pizza.margin_percent == pytest.approx(Decimal(1000) / 12)

    def test_most_profitable_excludes_full_margin(self, snapshot):
        data = _dashboard(snapshot)
        assert [item.name for item in data.most_profitable] == ["Pizza", "Pasta"]

    def test_sales_force_by_total_profit(self, snapshot):
        data = _dashboard(snapshot)
        assert [item.name for item in data.sales_force] == ["Pasta", "Pizza", "Agua"]

    def test_covers_summed_and_excluded(self, snapshot):
        data = _dashboard(snapshot)
        assert data.covers.name == "Cubiertos"
        assert data.covers.quantity == pytest.approx(35)
        assert all("Cubierto" not in item.name for item in data.top_selling)

    def test_top_internal_consumptions(self, snapshot):
        data = _dashboard(snapshot)
        assert [sale.name for sale in data.internal_consumptions] == ["Pasta", "Agua"]

    def test_unmatched_sales_logged(self, snapshot, caplog):
        with caplog.at_level(logging.INFO, logger="restaurant_costing.services"):
            _dashboard(snapshot)

        record = next(
            r for r in caplog.records if r.getMessage() == "calculate_dashboard_data: success"
        )
        assert record.matched_sales == 3
        assert record.unmatched_sales == 1

    def test_top_lists_capped_at_ten(self, make_recipe, make_sale):
        recipes = [make_recipe(i, f"Plato {i}", sale_price=10.0) for i in range(1, 13)]
        sales = [make_sale(f"Plato {i}", i) for i in range(1, 13)]

        data = calculate_dashboard_data(recipes, [], sales, [], [], None, {}, [], vat_rate=0)

        assert len(data.top_selling) == 10
        assert data.top_selling[0].name == "Plato 12"


class TestMenuEngineering:
    """Quadrants from popularity and profit per unit."""

    def test_quadrants(self, snapshot):
        engineering = _dashboard(snapshot).menu_engineering

        quadrants = {item.name: item.quadrant for item in engineering.items}
        assert quadrants == {"Pizza": MenuQuadrant.PUZZLE, "Pasta": MenuQuadrant.PLOWHORSE}
        assert engineering.average_popularity == pytest.approx(8.5)
        assert engineering.average_profitability == Decimal("7.5")

    def test_restricted_to_menu(self, snapshot):
        engineering = _dashboard(snapshot, menu_item_names=["Pizza"]).menu_engineering

        assert [item.name for item in engineering.items] == ["Pizza"]
        assert engineering.items[0].quadrant == MenuQuadrant.STAR

    def test_unanalyzed_category_excluded(self, snapshot):
        snapshot["recipes"][1].category = "Sin Analizar"
        engineering = _dashboard(snapshot).menu_engineering
        assert [item.name for item in engineering.items] == ["Pizza"]

    def test_classify_all_quadrants(self):
        items = [
            SaleProfitability("Star", "A", quantity=10, profit_per_unit=10, total_profit=100, margin_percent=50),
            SaleProfitability("Puzzle", "A", quantity=1, profit_per_unit=10, total_profit=10, margin_percent=50),
            SaleProfitability("Plowhorse", "A", quantity=10, profit_per_unit=1, total_profit=10, margin_percent=10),
            SaleProfitability("Dog", "A", quantity=1, profit_per_unit=1, total_profit=1, margin_percent=10),
        ]

        result = {item.name: item.quadrant for item in classify_menu_items(items).items}

        assert result == {
            "Star": MenuQuadrant.STAR,
            "Puzzle": MenuQuadrant.PUZZLE,
            "Plowhorse": MenuQuadrant.PLOWHORSE,
            "Dog": MenuQuadrant.DOG,
        }

    def test_classify_empty(self):
        engineering = classify_menu_items([])
        assert engineering.items == []
        assert engineering.average_popularity == 0.0


class TestLowStock:
    """Ledgers at or below their threshold."""

    def test_low_stock_from_dashboard(self, snapshot):
        # Tomate: 5 bought, 12 Pasta sold, 4 Pasta consumed internally
        data = _dashboard(snapshot, low_stock_settings={"Tomate": 0, "Harina": 2})

        assert [item.name for item in data.low_stock_items] == ["Tomate"]
        assert data.low_stock_items[0].balance == pytest.approx(-11.0)

    def test_threshold_is_inclusive(self):
        ledgers = [StockLedger(ingredient_name="Sal", unit="kg", final_balance=1.0)]
        items = find_low_stock_items(ledgers, {"Sal": 1.0})
        assert items[0].threshold == 1.0
        assert items[0].unit == "kg"

    def test_ingredients_without_threshold_ignored(self):
        ledgers = [StockLedger(ingredient_name="Sal", unit="kg", final_balance=-5.0)]
        assert find_low_stock_items(ledgers, {}) == []


class TestDuplicateNames:
    """Which record a repeated product name resolves to."""

    def test_last_recipe_and_first_price_win(self, snapshot, make_recipe):
        snapshot["recipes"].append(
            make_recipe(4, "Pizza", ingredients=[(2, 1.0, 0)], sale_price=30.0, category="Pizzas")
        )
        snapshot["prices"].append(ProductPrice(name="Pizza", sale_price=20.0))

        data = _dashboard(snapshot)

        pizza = next(item for item in data.top_selling if item.name == "Pizza")
        # Tomate-based Pizza (cost 3.0) priced at the first list price (12)
        assert pizza.profit_per_unit == Decimal("9")
        assert pizza.total_profit == Decimal("45")
