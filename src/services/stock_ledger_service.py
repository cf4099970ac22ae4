"""
Stock Ledger Service - theoretical stock per canonical ingredient.

Builds one chronological ledger per canonical ingredient name from four
event streams:

1. Purchases (debit): every purchase record
2. Sales (credit): sold products matched to recipes by exact name and
   decomposed into ingredients per serving
3. Internal consumption (credit): same matching, separate stream
4. Withdrawals (credit): named ingredients removed directly

Movements are sorted by date with a stable sort, so same-day movements keep
the stream order above, and a running balance is computed per ingredient.
Nothing in here raises on bad data: unmatched sales, missing references
and circular recipes contribute no movements or zero quantities, and
undated purchases, sales or withdrawals are dated at call time.
"""

import logging
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from src.models import Ingredient, MovementType, ProductSale, Recipe, Withdrawal
from src.services.logging_utils import get_service_logger, log_operation
from src.services.recipe_cost_service import find_recipe_by_name
from src.services.recipe_graph import CostingContext, ensure_context
from src.utils.constants import DEFAULT_UNIT
from src.utils.datetime_utils import (
    DateLike,
    is_on_or_before,
    to_ledger_datetime,
    utc_now,
)

logger = get_service_logger(__name__)


@dataclass
class Movement:
    """
    One dated debit or credit against an ingredient.

    ``balance`` is derived by the chronological pass, never stored.
    """

    movement_date: datetime
    movement_type: MovementType
    description: str
    debit: float = 0.0
    credit: float = 0.0
    balance: float = 0.0

    @property
    def net(self) -> float:
        return self.debit - self.credit


@dataclass
class StockLedger:
    """Chronological movement history of one canonical ingredient."""

    ingredient_name: str
    unit: str
    final_balance: float
    movements: List[Movement] = field(default_factory=list)


def build_ledgers(
    recipes: Sequence[Recipe],
    ingredients: Sequence[Ingredient],
    sales: Sequence[ProductSale],
    internal_consumptions: Sequence[ProductSale],
    withdrawals: Sequence[Withdrawal],
    as_of_date: Optional[DateLike] = None,
    context: Optional[CostingContext] = None,
) -> List[StockLedger]:
    """
    Build the stock ledger of every canonical ingredient.

    Args:
        recipes: Every recipe of the snapshot
        ingredients: Every purchase record of the snapshot
        sales: Product sales
        internal_consumptions: Internally consumed products
        withdrawals: Direct withdrawals
        as_of_date: Optional cutoff. Movements after it are excluded from
            both the balance and the returned movements. A date covers the
            whole day; a datetime is compared exactly.
        context: Optional shared context; reset if built for other collections

    Returns:
        One StockLedger per canonical ingredient name, sorted by name
    """
    context = ensure_context(context, ingredients, recipes)
    movements: Dict[str, List[Movement]] = {}

    def append(name: str, movement: Movement) -> None:
        movements.setdefault(name, []).append(movement)

    # Step 1: purchases
    for ingredient in ingredients:
        purchase_date = ingredient.purchase_date or utc_now()
        append(
            ingredient.stock_name,
            Movement(
                movement_date=to_ledger_datetime(purchase_date),
                movement_type=MovementType.PURCHASE,
                description=f"Purchase from {ingredient.supplier or 'N/A'}",
                debit=ingredient.purchase_quantity or 0,
            ),
        )

    # Steps 2 and 3: recipe-driven consumption
    unmatched = 0
    for stream, movement_type, label in (
        (sales, MovementType.SALE_CONSUMPTION, "Sale"),
        (internal_consumptions, MovementType.INTERNAL_CONSUMPTION, "Internal consumption"),
    ):
        for sale in stream:
            recipe = find_recipe_by_name(sale.name, recipes)
            if recipe is None:
                unmatched += 1
                log_operation(
                    logger,
                    operation="build_ledgers",
                    outcome="unmatched_sale",
                    level=logging.DEBUG,
                    sale_name=sale.name,
                    movement_type=movement_type.value,
                )
                continue

            per_serving = context.portions.resolve(recipe)
            sale_date = to_ledger_datetime(sale.sale_date or utc_now())
            for ingredient_name, quantity in per_serving.items():
                append(
                    ingredient_name,
                    Movement(
                        movement_date=sale_date,
                        movement_type=movement_type,
                        description=f'{label} of {sale.quantity}x "{sale.name}"',
                        credit=quantity * sale.quantity,
                    ),
                )

    # Step 4: withdrawals
    for withdrawal in withdrawals:
        description = f"Withdrawal by {withdrawal.person}"
        if withdrawal.observations:
            description += f" ({withdrawal.observations})"
        withdrawal_date = to_ledger_datetime(withdrawal.withdrawal_date or utc_now())
        for item in withdrawal.items:
            append(
                item.ingredient_name,
                Movement(
                    movement_date=withdrawal_date,
                    movement_type=MovementType.WITHDRAWAL,
                    description=description,
                    credit=item.quantity,
                ),
            )

    # Step 5: chronological balances
    units = _representative_units(ingredients)
    ledgers = [
        _balance_ledger(name, units.get(name, DEFAULT_UNIT), entries, as_of_date)
        for name, entries in movements.items()
    ]
    ledgers.sort(key=lambda ledger: ledger_sort_key(ledger.ingredient_name))

    log_operation(
        logger,
        operation="build_ledgers",
        outcome="success",
        ledger_count=len(ledgers),
        unmatched_sales=unmatched,
        as_of_date=as_of_date.isoformat() if as_of_date else None,
    )
    return ledgers


def ledger_sort_key(name: str) -> Tuple[str, str]:
    """
    Alphabetical key that ignores accents and case.

    "aceite" sorts before "Harina" and "Orégano" next to "Oregano"; the raw
    name only breaks ties.
    """
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return (folded.casefold(), name)


def _representative_units(ingredients: Sequence[Ingredient]) -> Dict[str, str]:
    """Unit of the first purchase record found for each canonical name."""
    units: Dict[str, str] = {}
    for ingredient in ingredients:
        units.setdefault(ingredient.stock_name, ingredient.unit)
    return units


def _balance_ledger(
    name: str,
    unit: str,
    entries: List[Movement],
    as_of_date: Optional[DateLike],
) -> StockLedger:
    """Sort, apply the cutoff and compute running balances for one ingredient."""
    # sorted() is stable: same-day entries keep stream order
    ordered = sorted(entries, key=lambda movement: movement.movement_date)
    if as_of_date is not None:
        ordered = [m for m in ordered if is_on_or_before(m.movement_date, as_of_date)]

    balance = 0.0
    for movement in ordered:
        balance = balance + movement.debit - movement.credit
        movement.balance = balance

    return StockLedger(ingredient_name=name, unit=unit, final_balance=balance, movements=ordered)


def find_ledger(ledgers: Sequence[StockLedger], ingredient_name: str) -> Optional[StockLedger]:
    """Return the ledger of a canonical ingredient, or None."""
    for ledger in ledgers:
        if ledger.ingredient_name == ingredient_name:
            return ledger
    return None
