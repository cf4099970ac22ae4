"""
Database models package.

This package contains the SQLAlchemy ORM models for the restaurant-costing
records: purchases, recipes, sales, withdrawals and physical counts.
"""

from .base import Base, BaseModel
from .enums import MovementType, SaleKind, MenuQuadrant
from .ingredient import Ingredient
from .recipe import Recipe, RecipeIngredient, SubRecipeItem
from .product_sale import ProductSale
from .product_price import ProductPrice
from .withdrawal import Withdrawal, WithdrawalItem
from .low_stock_threshold import LowStockThreshold
from .inventory_count import InventoryCount, InventoryCountItem

__all__ = [
    "Base",
    "BaseModel",
    # Enums
    "MovementType",
    "SaleKind",
    "MenuQuadrant",
    # Purchases and recipes
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
    "SubRecipeItem",
    # Consumption streams
    "ProductSale",
    "Withdrawal",
    "WithdrawalItem",
    # Reporting
    "ProductPrice",
    "LowStockThreshold",
    "InventoryCount",
    "InventoryCountItem",
]
