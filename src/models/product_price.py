"""Point-of-sale price list entry."""

from decimal import Decimal

from sqlalchemy import Column, String, Numeric

from .base import BaseModel


class ProductPrice(BaseModel):
    """
    Current menu price of a product.

    Attributes:
        name: Product name, matched exactly against recipe names
        sale_price: Primary (dining room) price
        category: Point-of-sale category
        code: Point-of-sale product code
    """

    __tablename__ = "product_prices"

    name = Column(String(200), nullable=False, unique=True)
    sale_price = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))
    category = Column(String(100), nullable=True)
    code = Column(String(50), nullable=True)
