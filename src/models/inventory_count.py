"""
Physical inventory count models.

An InventoryCount freezes the theoretical stock ledger balances at the time
of a physical count, next to what was actually counted.
"""

from decimal import Decimal

from sqlalchemy import Column, String, Float, Integer, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel


class InventoryCount(BaseModel):
    """
    Physical inventory count header.

    Attributes:
        count_date: When the count was taken
        items: One InventoryCountItem per canonical ingredient
    """

    __tablename__ = "inventory_counts"

    count_date = Column(DateTime, nullable=False, index=True)

    items = relationship(
        "InventoryCountItem",
        back_populates="inventory_count",
        cascade="all, delete-orphan",
        lazy="joined",
    )

    @property
    def total_variance_cost(self) -> Decimal:
        """Sum of the variance cost of every item."""
        return sum((item.variance_cost for item in self.items), Decimal("0.00"))

    def __repr__(self) -> str:
        return f"InventoryCount(id={self.id}, count_date={self.count_date}, items={len(self.items)})"


class InventoryCountItem(BaseModel):
    """
    Counted ingredient.

    Attributes:
        inventory_count_id: Foreign key to InventoryCount
        ingredient_name: Canonical ingredient name
        unit: Unit of measure
        theoretical_quantity: Ledger final balance at count time
        physical_quantity: Quantity actually counted
        variance_quantity: physical - theoretical
        variance_cost: variance_quantity valued at the latest purchase cost
    """

    __tablename__ = "inventory_count_items"

    inventory_count_id = Column(
        Integer, ForeignKey("inventory_counts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_name = Column(String(200), nullable=False)
    unit = Column(String(20), nullable=False)
    theoretical_quantity = Column(Float, nullable=False)
    physical_quantity = Column(Float, nullable=False)
    variance_quantity = Column(Float, nullable=False)
    variance_cost = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))

    inventory_count = relationship("InventoryCount", back_populates="items")
