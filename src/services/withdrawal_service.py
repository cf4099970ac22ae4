"""
Withdrawal Service - pricing direct stock withdrawals.

A withdrawal names canonical ingredients and quantities. Each line is
priced at the ingredient's most recent purchase cost; names without any
purchase are priced at 0 in the default unit.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Tuple

from src.models import Ingredient, Withdrawal, WithdrawalItem
from src.services.cost_utils import to_decimal
from src.services.exceptions import ValidationError
from src.services.logging_utils import get_service_logger, log_operation
from src.services.purchase_service import get_latest_purchases
from src.utils.constants import DEFAULT_UNIT
from src.utils.datetime_utils import utc_now

logger = get_service_logger(__name__)


def build_withdrawal(
    person: str,
    items: Iterable[Tuple[str, float]],
    ingredients: Sequence[Ingredient],
    withdrawal_date: Optional[datetime] = None,
    observations: Optional[str] = None,
) -> Withdrawal:
    """
    Build a priced, unsaved Withdrawal.

    Args:
        person: Who takes the goods
        items: (canonical ingredient name, quantity) pairs
        ingredients: Purchase records used for pricing
        withdrawal_date: When the goods were taken (default: now)
        observations: Optional remarks

    Returns:
        Withdrawal with priced WithdrawalItems and its total cost

    Raises:
        ValidationError: If person is blank, there are no items, or an item
            has no name or a non-positive quantity
    """
    items = list(items)
    errors = []
    if not person or not person.strip():
        errors.append("Person is required")
    if not items:
        errors.append("At least one item is required")
    for index, (name, quantity) in enumerate(items, start=1):
        if not name:
            errors.append(f"Item {index}: ingredient name is required")
        if quantity is None or quantity <= 0:
            errors.append(f"Item {index}: quantity must be greater than 0")
    if errors:
        raise ValidationError(errors)

    latest = get_latest_purchases(ingredients)
    withdrawal_items = []
    for name, quantity in items:
        purchase = latest.get(name)
        cost_per_unit = to_decimal(purchase.cost_per_unit) if purchase else Decimal("0.00")
        withdrawal_items.append(
            WithdrawalItem(
                ingredient_id=purchase.id if purchase else None,
                ingredient_name=name,
                quantity=quantity,
                unit=purchase.unit if purchase else DEFAULT_UNIT,
                cost_per_unit=cost_per_unit,
                total_cost=to_decimal(quantity) * cost_per_unit,
            )
        )

    withdrawal = Withdrawal(
        withdrawal_date=withdrawal_date or utc_now(),
        person=person,
        observations=observations,
        items=withdrawal_items,
        total_withdrawal_cost=sum((item.total_cost for item in withdrawal_items), Decimal("0.00")),
    )

    log_operation(
        logger,
        operation="build_withdrawal",
        outcome="success",
        person=person,
        item_count=len(withdrawal_items),
        total_cost=withdrawal.total_withdrawal_cost,
    )
    return withdrawal
