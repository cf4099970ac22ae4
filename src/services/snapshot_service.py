"""
Snapshot Service - loading the records the costing core works on.

The costing functions take whole collections and never query the database.
This module reads those collections in one transaction and hands them over
as a CostingSnapshot.

Session Management Pattern:
- load_snapshot() accepts session=None
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.models import (
    Ingredient,
    LowStockThreshold,
    ProductPrice,
    ProductSale,
    Recipe,
    SaleKind,
    Withdrawal,
)
from src.services.database import session_scope
from src.services.exceptions import DatabaseError
from src.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


@dataclass
class CostingSnapshot:
    """Every record the costing core needs, loaded at one point in time."""

    ingredients: List[Ingredient] = field(default_factory=list)
    recipes: List[Recipe] = field(default_factory=list)
    sales: List[ProductSale] = field(default_factory=list)
    internal_consumptions: List[ProductSale] = field(default_factory=list)
    withdrawals: List[Withdrawal] = field(default_factory=list)
    prices: List[ProductPrice] = field(default_factory=list)
    low_stock_settings: Dict[str, float] = field(default_factory=dict)


def load_snapshot(session: Optional[Session] = None) -> CostingSnapshot:
    """
    Load every costing record.

    Args:
        session: Optional session for transaction sharing

    Returns:
        CostingSnapshot; product sales are split into sales and internal
        consumptions by their kind

    Raises:
        DatabaseError: If the database operation fails
    """
    try:
        if session is not None:
            return _load_snapshot_impl(session)
        with session_scope() as session:
            return _load_snapshot_impl(session)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to load costing snapshot", e)


def _load_snapshot_impl(session: Session) -> CostingSnapshot:
    product_sales = session.query(ProductSale).order_by(ProductSale.id).all()
    snapshot = CostingSnapshot(
        ingredients=session.query(Ingredient).order_by(Ingredient.id).all(),
        recipes=session.query(Recipe).order_by(Recipe.id).all(),
        sales=[s for s in product_sales if s.kind == SaleKind.SALE],
        internal_consumptions=[s for s in product_sales if s.kind == SaleKind.INTERNAL],
        withdrawals=session.query(Withdrawal).order_by(Withdrawal.id).all(),
        prices=session.query(ProductPrice).order_by(ProductPrice.id).all(),
        low_stock_settings={
            row.ingredient_name: row.threshold for row in session.query(LowStockThreshold).all()
        },
    )

    log_operation(
        logger,
        operation="load_snapshot",
        outcome="success",
        ingredient_count=len(snapshot.ingredients),
        recipe_count=len(snapshot.recipes),
        sale_count=len(snapshot.sales),
        internal_consumption_count=len(snapshot.internal_consumptions),
        withdrawal_count=len(snapshot.withdrawals),
    )
    return snapshot
