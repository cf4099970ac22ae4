"""
Inventory Count Service - physical counts against theoretical stock.

A physical count is compared with the stock ledger's final balances (usually
built with as_of_date set to the count day). The variance is valued at each
ingredient's most recent purchase cost.

Session Management Pattern:
- Functions that touch the database accept session=None
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.models import Ingredient, InventoryCount, InventoryCountItem
from src.services.cost_utils import to_decimal
from src.services.database import session_scope
from src.services.exceptions import DatabaseError, ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.purchase_service import get_latest_purchases
from src.services.stock_ledger_service import StockLedger
from src.utils.constants import DEFAULT_UNIT
from src.utils.datetime_utils import utc_now

logger = get_service_logger(__name__)


def build_inventory_count(
    ledgers: Sequence[StockLedger],
    ingredients: Sequence[Ingredient],
    physical_counts: Mapping[str, float],
    count_date: Optional[datetime] = None,
) -> InventoryCount:
    """
    Build an unsaved InventoryCount covering every ledger.

    Args:
        ledgers: Stock ledgers (theoretical quantities)
        ingredients: Purchase records used to value the variance
        physical_counts: Canonical name -> counted quantity. Ingredients
            not counted are recorded as 0.
        count_date: When the count was taken (default: now)

    Returns:
        InventoryCount with one item per ledger

    Raises:
        ValidationError: If a counted quantity is not a number or is negative
    """
    errors = []
    for name, quantity in physical_counts.items():
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            errors.append(f"Count for '{name}' must be a number")
        elif quantity < 0:
            errors.append(f"Count for '{name}' cannot be negative")
    if errors:
        raise ValidationError(errors)

    latest = get_latest_purchases(ingredients)
    items = []
    for ledger in ledgers:
        theoretical = ledger.final_balance
        physical = float(physical_counts.get(ledger.ingredient_name, 0))
        variance = physical - theoretical
        purchase = latest.get(ledger.ingredient_name)
        items.append(
            InventoryCountItem(
                ingredient_name=ledger.ingredient_name,
                unit=purchase.unit if purchase else DEFAULT_UNIT,
                theoretical_quantity=theoretical,
                physical_quantity=physical,
                variance_quantity=variance,
                variance_cost=(
                    to_decimal(variance) * to_decimal(purchase.cost_per_unit)
                    if purchase
                    else Decimal("0.00")
                ),
            )
        )

    return InventoryCount(count_date=count_date or utc_now(), items=items)


def save_inventory_count(
    inventory_count: InventoryCount,
    session: Optional[Session] = None,
) -> InventoryCount:
    """
    Persist an InventoryCount and its items.

    Args:
        inventory_count: Count built by build_inventory_count()
        session: Optional session for transaction sharing

    Returns:
        The saved InventoryCount (with id assigned)

    Raises:
        DatabaseError: If the database operation fails
    """
    if session is not None:
        return _save_inventory_count_impl(inventory_count, session)
    try:
        with session_scope() as session:
            return _save_inventory_count_impl(inventory_count, session)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to save inventory count", e)


def _save_inventory_count_impl(inventory_count: InventoryCount, session: Session) -> InventoryCount:
    session.add(inventory_count)
    session.flush()
    log_operation(
        logger,
        operation="save_inventory_count",
        outcome="success",
        inventory_count_id=inventory_count.id,
        item_count=len(inventory_count.items),
        total_variance_cost=inventory_count.total_variance_cost,
    )
    return inventory_count


def get_inventory_counts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Optional[Session] = None,
) -> List[InventoryCount]:
    """
    List saved inventory counts, newest first.

    Args:
        start_date: Optional first day (inclusive)
        end_date: Optional last day (inclusive)
        session: Optional session for transaction sharing

    Raises:
        DatabaseError: If the database operation fails
    """
    if session is not None:
        return _get_inventory_counts_impl(start_date, end_date, session)
    try:
        with session_scope() as session:
            return _get_inventory_counts_impl(start_date, end_date, session)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to list inventory counts", e)


def _get_inventory_counts_impl(
    start_date: Optional[date],
    end_date: Optional[date],
    session: Session,
) -> List[InventoryCount]:
    query = session.query(InventoryCount)
    if start_date is not None:
        query = query.filter(InventoryCount.count_date >= datetime.combine(start_date, datetime.min.time()))
    if end_date is not None:
        day_after = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
        query = query.filter(InventoryCount.count_date < day_after)
    return query.order_by(InventoryCount.count_date.desc()).all()
