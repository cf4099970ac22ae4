"""
Product sale model.

A point-of-sale line: a product name sold in some quantity on some date.
Regular sales and internal consumption (staff meals, comped tables) share
the table and are told apart by ``kind``.
"""

from sqlalchemy import Column, String, Float, Date, Enum as SAEnum, Index

from .base import BaseModel
from .enums import SaleKind


class ProductSale(BaseModel):
    """
    Sold or internally consumed product.

    Attributes:
        name: Product name as exported by the point of sale
        quantity: Units sold
        sale_date: Date of the sale
        table_type: Point-of-sale table type (e.g., "INVITACION")
        kind: SaleKind.SALE or SaleKind.INTERNAL
    """

    __tablename__ = "product_sales"

    name = Column(String(200), nullable=False, index=True)
    quantity = Column(Float, nullable=False)
    sale_date = Column(Date, nullable=False, index=True)
    table_type = Column(String(100), nullable=True)
    kind = Column(SAEnum(SaleKind), nullable=False, default=SaleKind.SALE)

    __table_args__ = (Index("idx_product_sale_kind_date", "kind", "sale_date"),)

    def __repr__(self) -> str:
        return (
            f"ProductSale(id={self.id}, name='{self.name}', "
            f"quantity={self.quantity}, kind={self.kind})"
        )
