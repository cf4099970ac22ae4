"""
Ingredient purchase record.

One row per purchase invoice line, not per logical ingredient. Several rows
can share a canonical name, which is what the stock ledger aggregates on.
"""

from decimal import Decimal

from sqlalchemy import Column, String, Float, Date, Index, Numeric
from sqlalchemy.orm import relationship

from .base import BaseModel


class Ingredient(BaseModel):
    """
    Purchase record for an ingredient.

    Cost and unit belong to this purchase, not to the canonical ingredient:
    two purchases of the same canonical ingredient may differ in both.

    Attributes:
        name: Name as written on the invoice (e.g., "Harina de Trigo 0000")
        canonical_name: Unification key (e.g., "Harina de Trigo"), optional
        supplier: Supplier name
        purchase_date: Date of purchase
        purchase_quantity: Quantity bought, in ``unit``
        unit: Unit of measure of this purchase
        cost_per_unit: Cost of one ``unit``
    """

    __tablename__ = "ingredients"

    name = Column(String(200), nullable=False, index=True)
    canonical_name = Column(String(200), nullable=True, index=True)
    supplier = Column(String(200), nullable=True)
    purchase_date = Column(Date, nullable=True, index=True)
    purchase_quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(String(20), nullable=False)
    cost_per_unit = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))

    recipe_ingredients = relationship("RecipeIngredient", back_populates="ingredient")

    __table_args__ = (Index("idx_ingredient_stock_name", "canonical_name", "name"),)

    @property
    def stock_name(self) -> str:
        """Identity used for stock aggregation: canonical name, else invoice name."""
        return self.canonical_name or self.name

    def __repr__(self) -> str:
        return (
            f"Ingredient(id={self.id}, name='{self.name}', "
            f"stock_name='{self.stock_name}', unit='{self.unit}')"
        )
