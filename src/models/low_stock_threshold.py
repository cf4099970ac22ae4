"""Low-stock alert threshold per canonical ingredient."""

from sqlalchemy import Column, String, Float

from .base import BaseModel


class LowStockThreshold(BaseModel):
    """
    Alert threshold.

    Attributes:
        ingredient_name: Canonical ingredient name
        threshold: Balance at or below which the ingredient is flagged
    """

    __tablename__ = "low_stock_thresholds"

    ingredient_name = Column(String(200), nullable=False, unique=True)
    threshold = Column(Float, nullable=False)

    def __repr__(self) -> str:
        return (
            f"LowStockThreshold(ingredient_name='{self.ingredient_name}', "
            f"threshold={self.threshold})"
        )
