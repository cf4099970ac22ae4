"""
Withdrawal models.

A withdrawal removes named ingredients from stock directly, without going
through a recipe (owners taking goods home, transfers, etc.).
"""

from decimal import Decimal

from sqlalchemy import Column, String, Float, Integer, Numeric, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel


class Withdrawal(BaseModel):
    """
    Withdrawal header.

    Attributes:
        withdrawal_date: When the goods were taken
        person: Who took them
        observations: Optional free-text remarks
        total_withdrawal_cost: Sum of item costs
    """

    __tablename__ = "withdrawals"

    withdrawal_date = Column(DateTime, nullable=False, index=True)
    person = Column(String(100), nullable=False)
    observations = Column(Text, nullable=True)
    total_withdrawal_cost = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))

    items = relationship(
        "WithdrawalItem",
        back_populates="withdrawal",
        cascade="all, delete-orphan",
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"Withdrawal(id={self.id}, person='{self.person}', items={len(self.items)})"


class WithdrawalItem(BaseModel):
    """
    Withdrawn ingredient line.

    Attributes:
        withdrawal_id: Foreign key to Withdrawal
        ingredient_id: Purchase record used for pricing, if any
        ingredient_name: Canonical ingredient name the stock is taken from
        quantity: Quantity withdrawn
        unit: Unit of measure
        cost_per_unit: Cost used to price the line
        total_cost: quantity * cost_per_unit
    """

    __tablename__ = "withdrawal_items"

    withdrawal_id = Column(
        Integer, ForeignKey("withdrawals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    ingredient_id = Column(Integer, nullable=True)
    ingredient_name = Column(String(200), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    cost_per_unit = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))
    total_cost = Column(Numeric(10, 4), nullable=False, default=Decimal("0.0000"))

    withdrawal = relationship("Withdrawal", back_populates="items")

    def __repr__(self) -> str:
        return (
            f"WithdrawalItem(ingredient_name='{self.ingredient_name}', "
            f"quantity={self.quantity}, unit='{self.unit}')"
        )
