"""Pytest configuration and fixtures for service layer tests."""

from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

import src.models  # noqa: F401  (registers every table with Base)
from src.models import (
    Ingredient,
    ProductSale,
    Recipe,
    RecipeIngredient,
    SaleKind,
    SubRecipeItem,
    Withdrawal,
    WithdrawalItem,
)
from src.models.base import Base
from src.utils.config import reset_config


@pytest.fixture(scope="function")
def test_db(monkeypatch):
    """Fresh in-memory database per test, wired into session_scope().

    Yields the scoped session registry; call it to get the test's session.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = scoped_session(sessionmaker(bind=engine, expire_on_commit=False))

    import src.services.database as db_module

    monkeypatch.setattr(db_module, "get_session_factory", lambda: Session)

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test starts from default configuration."""
    for name in ("ENV", "VAT_RATE", "LOG_LEVEL", "DATABASE_URL"):
        monkeypatch.delenv(f"RESTAURANT_COSTING_{name}", raising=False)
    reset_config()
    yield
    reset_config()


# ============================================================================
# In-memory record builders
#
# The costing core only reads attributes, so most tests work on transient
# model instances with explicit ids and never open a session.
# ============================================================================


@pytest.fixture
def make_ingredient():
    """Build a transient purchase record."""

    def _make(
        id,
        name,
        cost_per_unit=0.0,
        purchase_quantity=0.0,
        unit="kg",
        canonical_name=None,
        supplier=None,
        purchase_date=date(2024, 1, 1),
    ):
        return Ingredient(
            id=id,
            name=name,
            canonical_name=canonical_name,
            supplier=supplier,
            purchase_date=purchase_date,
            purchase_quantity=purchase_quantity,
            unit=unit,
            cost_per_unit=cost_per_unit,
        )

    return _make


@pytest.fixture
def make_recipe():
    """Build a transient recipe.

    ``ingredients`` holds (ingredient_id, quantity, waste_percentage) tuples;
    ``sub_recipes`` holds (sub_recipe_id, quantity, direct_cost) tuples.
    """

    def _make(
        id,
        name,
        yield_quantity=1.0,
        ingredients=(),
        sub_recipes=(),
        sale_price=0.0,
        category="Pasta",
    ):
        return Recipe(
            id=id,
            name=name,
            category=category,
            yield_quantity=yield_quantity,
            sale_price=sale_price,
            recipe_ingredients=[
                RecipeIngredient(
                    recipe_id=id,
                    ingredient_id=ingredient_id,
                    quantity=quantity,
                    unit="kg",
                    waste_percentage=waste,
                )
                for ingredient_id, quantity, waste in ingredients
            ],
            sub_recipes=[
                SubRecipeItem(
                    recipe_id=id,
                    sub_recipe_id=sub_recipe_id,
                    quantity=quantity,
                    direct_cost=direct_cost,
                )
                for sub_recipe_id, quantity, direct_cost in sub_recipes
            ],
        )

    return _make


@pytest.fixture
def make_sale():
    """Build a transient product sale (or internal consumption)."""

    def _make(name, quantity, sale_date=date(2024, 1, 5), kind=SaleKind.SALE):
        return ProductSale(name=name, quantity=quantity, sale_date=sale_date, kind=kind)

    return _make


@pytest.fixture
def make_withdrawal():
    """Build a transient withdrawal from (ingredient_name, quantity) pairs."""

    def _make(items, person="Chef", withdrawal_date=datetime(2024, 1, 10, 12, 0), observations=None):
        return Withdrawal(
            withdrawal_date=withdrawal_date,
            person=person,
            observations=observations,
            items=[
                WithdrawalItem(ingredient_name=name, quantity=quantity, unit="kg")
                for name, quantity in items
            ],
        )

    return _make
