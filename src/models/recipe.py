"""
Recipe models.

This module contains:
- Recipe: Dish or preparation with its yield and sale price
- RecipeIngredient: Line consuming one specific purchase record
- SubRecipeItem: Line consuming servings of another recipe
"""

from decimal import Decimal

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    Numeric,
    Text,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship

from src.utils.constants import UNANALYZED_CATEGORY

from .base import BaseModel


class Recipe(BaseModel):
    """
    Recipe model.

    Attributes:
        name: Display name; sales are matched against it exactly
        category: Recipe category (e.g., "Pasta", "Salsas")
        yield_quantity: Servings produced by one full batch
        sale_price: Menu price of one serving
        notes: Free-text notes
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False, index=True)
    category = Column(String(100), nullable=False, default=UNANALYZED_CATEGORY)
    yield_quantity = Column(Float, nullable=False, default=1.0)
    sale_price = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))
    notes = Column(Text, nullable=True)

    recipe_ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        lazy="joined",
    )

    # Nested recipes; cycles are tolerated at costing time, not rejected here
    sub_recipes = relationship(
        "SubRecipeItem",
        foreign_keys="SubRecipeItem.recipe_id",
        back_populates="recipe",
        cascade="all, delete-orphan",
        lazy="joined",
    )

    __table_args__ = (Index("idx_recipe_category", "category"),)

    def __repr__(self) -> str:
        return f"Recipe(id={self.id}, name='{self.name}', category='{self.category}')"


class RecipeIngredient(BaseModel):
    """
    Ingredient line of a recipe.

    References one purchase record by id (not by canonical name), so the
    line is costed at that purchase's cost per unit.

    Attributes:
        recipe_id: Foreign key to Recipe
        ingredient_id: Foreign key to the Ingredient purchase record
        quantity: Amount used per full batch
        unit: Unit of measurement
        waste_percentage: Trim/shrinkage loss, 0-100
    """

    __tablename__ = "recipe_ingredients"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False)

    quantity = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    waste_percentage = Column(Float, nullable=True)

    recipe = relationship("Recipe", back_populates="recipe_ingredients")
    ingredient = relationship("Ingredient", back_populates="recipe_ingredients")

    __table_args__ = (
        Index("idx_recipe_ingredient_recipe", "recipe_id"),
        Index("idx_recipe_ingredient_ingredient", "ingredient_id"),
    )

    def __repr__(self) -> str:
        return (
            f"RecipeIngredient(recipe_id={self.recipe_id}, "
            f"ingredient_id={self.ingredient_id}, "
            f"quantity={self.quantity}, unit='{self.unit}')"
        )


class SubRecipeItem(BaseModel):
    """
    Sub-recipe line of a recipe.

    Attributes:
        recipe_id: Foreign key to the parent Recipe
        sub_recipe_id: Foreign key to the Recipe being used
        quantity: Servings of the sub-recipe consumed per full parent batch
        direct_cost: Fixed cost per serving; when set, the sub-recipe is
            not costed recursively
    """

    __tablename__ = "sub_recipe_items"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    sub_recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False)

    quantity = Column(Float, nullable=False, default=1.0)
    direct_cost = Column(Numeric(10, 4), nullable=True)

    recipe = relationship("Recipe", foreign_keys=[recipe_id], back_populates="sub_recipes")
    sub_recipe = relationship("Recipe", foreign_keys=[sub_recipe_id], lazy="select")

    __table_args__ = (
        Index("idx_sub_recipe_item_recipe", "recipe_id"),
        Index("idx_sub_recipe_item_sub_recipe", "sub_recipe_id"),
    )

    def __repr__(self) -> str:
        return (
            f"SubRecipeItem(recipe_id={self.recipe_id}, "
            f"sub_recipe_id={self.sub_recipe_id}, quantity={self.quantity})"
        )
